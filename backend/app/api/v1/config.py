"""
Endpoints de configuração da política de multas.

Contratos:
    - GET /config/fines: Política vigente
    - PUT /config/fines: Atualização parcial (campos omitidos não mudam)
    - GET /config: Entradas de system_configs de uma categoria

Status codes:
    - 200: Sucesso
    - 400: Nenhum campo informado ou valor inválido
    - 422: Erro de validação
"""

from fastapi import APIRouter, Query

from app.core.deps import DbSession
from app.models.enums import ConfigCategory
from app.schemas.config import (
    FineConfigRead,
    FineConfigUpdate,
    FineConfigUpdateRequest,
    SystemConfigRead,
)
from app.services.config import ConfigService

router = APIRouter(prefix="/config", tags=["Config"])


@router.get(
    "/fines",
    response_model=FineConfigRead,
    summary="Consultar política de multas",
)
async def get_fine_config(db: DbSession) -> FineConfigRead:
    return await ConfigService(db).get_fine_configuration()


@router.put(
    "/fines",
    response_model=FineConfigRead,
    summary="Atualizar política de multas",
)
async def update_fine_config(data: FineConfigUpdateRequest, db: DbSession) -> FineConfigRead:
    """Novas multas passam a usar os valores atualizados; as já gravadas não mudam."""
    changes = FineConfigUpdate(**data.model_dump(exclude={"updated_by"}))
    return await ConfigService(db).update_fine_configuration(changes, updated_by=data.updated_by)


@router.get(
    "",
    response_model=list[SystemConfigRead],
    summary="Listar configurações",
)
async def list_configs(
    db: DbSession,
    category: ConfigCategory = Query(ConfigCategory.FINES, description="Categoria"),
) -> list[SystemConfigRead]:
    configs = await ConfigService(db).list_configs(category)
    return [SystemConfigRead.model_validate(config) for config in configs]
