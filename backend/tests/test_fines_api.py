"""
Testes dos endpoints /api/v1/fines, /config e /system.

A sessão é mockada pelo fixture `client`; os services são substituídos
com patch.object para testar apenas o mapeamento HTTP.
"""

import uuid
from decimal import Decimal
from unittest.mock import patch

import pytest
from httpx import AsyncClient

from app.core.exceptions import (
    AlreadyCompletedError,
    CannotWaivePaidError,
    ConfigurationUnavailableError,
    DuplicateFineError,
    NotFoundError,
)
from app.models.enums import FineStatus, FineType, PaymentMethod, RateType
from app.schemas.config import FineConfigRead
from app.schemas.fine import BalanceReconciliation, FineSummary
from app.services.config import ConfigService
from app.services.fine import FineService
from app.services.fine_calculator import FineCalculation, FinePolicy
from app.services.overdue_sweep import OverdueSweepService, SweepResult

STAFF_ID = str(uuid.uuid4())


# ==========================================
# Fines
# ==========================================

class TestOverdueEndpoints:
    """Prévia e criação de multa por atraso."""

    @pytest.mark.anyio
    async def test_preview(self, client: AsyncClient, sample_loan):
        calculation = FineCalculation(
            fine_amount=Decimal("150.00"),
            overdue_days=5,
            grace_period_used=False,
            rate_type=RateType.PER_DAY,
            daily_rate=Decimal("50"),
            hourly_rate=Decimal("5"),
            overdue_hours=120,
        )

        with patch.object(FineService, "calculate_overdue_fine", return_value=calculation):
            response = await client.get(f"/api/v1/fines/loans/{sample_loan.id}/preview")

        assert response.status_code == 200
        data = response.json()
        assert data["loan_id"] == str(sample_loan.id)
        assert Decimal(data["fine_amount"]) == Decimal("150.00")
        assert data["grace_period_used"] is False
        assert data["overdue_hours"] == 120

    @pytest.mark.anyio
    async def test_create_overdue(self, client: AsyncClient, sample_loan, make_fine):
        fine = make_fine(amount="150.00")

        with patch.object(FineService, "create_overdue_fine", return_value=fine):
            response = await client.post(f"/api/v1/fines/loans/{sample_loan.id}/overdue")

        assert response.status_code == 200
        data = response.json()
        assert data["created"] is True
        assert data["fine"]["id"] == str(fine.id)
        assert data["fine"]["status"] == "pending"

    @pytest.mark.anyio
    async def test_create_overdue_within_grace(self, client: AsyncClient, sample_loan):
        with patch.object(FineService, "create_overdue_fine", return_value=None):
            response = await client.post(f"/api/v1/fines/loans/{sample_loan.id}/overdue")

        assert response.status_code == 200
        data = response.json()
        assert data["created"] is False
        assert data["fine"] is None

    @pytest.mark.anyio
    async def test_duplicate_returns_409_with_code(self, client: AsyncClient, sample_loan):
        error = DuplicateFineError(sample_loan.id, "overdue")

        with patch.object(FineService, "create_overdue_fine", side_effect=error):
            response = await client.post(f"/api/v1/fines/loans/{sample_loan.id}/overdue")

        assert response.status_code == 409
        assert response.json()["code"] == "duplicate_fine"

    @pytest.mark.anyio
    async def test_completed_loan_returns_400(self, client: AsyncClient, sample_loan):
        error = AlreadyCompletedError(sample_loan.id)

        with patch.object(FineService, "create_overdue_fine", side_effect=error):
            response = await client.post(f"/api/v1/fines/loans/{sample_loan.id}/overdue")

        assert response.status_code == 400
        assert response.json()["code"] == "already_completed"

    @pytest.mark.anyio
    async def test_unknown_loan_returns_404(self, client: AsyncClient):
        loan_id = uuid.uuid4()

        with patch.object(FineService, "calculate_overdue_fine", side_effect=NotFoundError("Empréstimo", loan_id)):
            response = await client.get(f"/api/v1/fines/loans/{loan_id}/preview")

        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "not_found"
        assert str(loan_id) in body["detail"]

    @pytest.mark.anyio
    async def test_invalid_loan_id_returns_422(self, client: AsyncClient):
        response = await client.get("/api/v1/fines/loans/not-a-uuid/preview")

        assert response.status_code == 422


class TestLostEndpoint:
    """Registro de perda."""

    @pytest.mark.anyio
    async def test_create_lost(self, client: AsyncClient, sample_loan, make_fine):
        fine = make_fine(amount="2000.00", fine_type=FineType.LOST)

        with patch.object(FineService, "create_lost_book_fine", return_value=fine) as mock_create:
            response = await client.post(
                f"/api/v1/fines/loans/{sample_loan.id}/lost",
                json={"replacement_cost": "1000", "issued_by": STAFF_ID},
            )

        assert response.status_code == 201
        assert response.json()["type"] == "lost"
        kwargs = mock_create.await_args.kwargs
        assert kwargs["replacement_cost"] == Decimal("1000")
        assert str(kwargs["issued_by"]) == STAFF_ID

    @pytest.mark.anyio
    async def test_negative_replacement_cost_rejected(self, client: AsyncClient, sample_loan):
        response = await client.post(
            f"/api/v1/fines/loans/{sample_loan.id}/lost",
            json={"replacement_cost": "-5"},
        )

        assert response.status_code == 422


class TestPayWaiveEndpoints:
    """Pagamento e perdão."""

    @pytest.mark.anyio
    async def test_pay(self, client: AsyncClient, make_fine):
        fine = make_fine()
        fine.status = FineStatus.PAID

        with patch.object(FineService, "pay_fine", return_value=fine) as mock_pay:
            response = await client.post(
                f"/api/v1/fines/{fine.id}/pay",
                json={"paid_by": STAFF_ID, "payment_method": "mpesa", "receipt_number": "QX12"},
            )

        assert response.status_code == 200
        assert response.json()["status"] == "paid"
        kwargs = mock_pay.await_args.kwargs
        assert kwargs["payment_method"] == PaymentMethod.MPESA
        assert kwargs["receipt_number"] == "QX12"

    @pytest.mark.anyio
    async def test_pay_requires_staff(self, client: AsyncClient):
        response = await client.post(f"/api/v1/fines/{uuid.uuid4()}/pay", json={})

        assert response.status_code == 422

    @pytest.mark.anyio
    async def test_pay_unknown_method(self, client: AsyncClient):
        response = await client.post(
            f"/api/v1/fines/{uuid.uuid4()}/pay",
            json={"paid_by": STAFF_ID, "payment_method": "cheque"},
        )

        assert response.status_code == 422

    @pytest.mark.anyio
    async def test_waive_paid_returns_400(self, client: AsyncClient):
        fine_id = uuid.uuid4()

        with patch.object(FineService, "waive_fine", side_effect=CannotWaivePaidError(fine_id)):
            response = await client.post(
                f"/api/v1/fines/{fine_id}/waive",
                json={"waived_by": STAFF_ID, "reason": "Cortesia"},
            )

        assert response.status_code == 400
        assert response.json()["code"] == "cannot_waive_paid"

    @pytest.mark.anyio
    async def test_waive_blank_reason_rejected(self, client: AsyncClient):
        response = await client.post(
            f"/api/v1/fines/{uuid.uuid4()}/waive",
            json={"waived_by": STAFF_ID, "reason": "   "},
        )

        assert response.status_code == 422


class TestQueryEndpoints:
    """Listagem, resumo e estatísticas."""

    @pytest.mark.anyio
    async def test_list_paginated(self, client: AsyncClient, make_fine, sample_user):
        fines = [make_fine(), make_fine(amount="20.00")]

        with patch.object(FineService, "list_fines", return_value=(fines, 12)) as mock_list:
            response = await client.get(
                "/api/v1/fines",
                params={"user_id": str(sample_user.id), "status": "pending", "page": 2, "page_size": 2},
            )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 12
        assert data["page"] == 2
        assert data["pages"] == 6
        assert len(data["items"]) == 2
        kwargs = mock_list.await_args.kwargs
        assert kwargs["status"] == FineStatus.PENDING
        assert kwargs["user_id"] == sample_user.id

    @pytest.mark.anyio
    async def test_summary(self, client: AsyncClient, sample_user):
        summary = FineSummary(
            user_id=sample_user.id,
            total_fines=Decimal("150.00"),
            pending_fines=Decimal("150.00"),
            fine_balance=Decimal("150.00"),
        )

        with patch.object(FineService, "get_user_fine_summary", return_value=summary):
            response = await client.get(f"/api/v1/fines/users/{sample_user.id}/summary")

        assert response.status_code == 200
        assert Decimal(response.json()["pending_fines"]) == Decimal("150.00")

    @pytest.mark.anyio
    async def test_stats_days_validated(self, client: AsyncClient):
        response = await client.get("/api/v1/fines/stats", params={"days": 0})

        assert response.status_code == 422


# ==========================================
# Config
# ==========================================

class TestConfigEndpoints:
    """GET/PUT /config/fines."""

    @pytest.mark.anyio
    async def test_get(self, client: AsyncClient):
        config = FineConfigRead.from_policy(FinePolicy())

        with patch.object(ConfigService, "get_fine_configuration", return_value=config):
            response = await client.get("/api/v1/config/fines")

        assert response.status_code == 200
        data = response.json()
        assert data["grace_period"] == 2
        assert data["rate_type"] == "per_day"

    @pytest.mark.anyio
    async def test_put_passes_only_changes(self, client: AsyncClient):
        config = FineConfigRead.from_policy(FinePolicy(max_fine=Decimal("500")))
        admin_id = str(uuid.uuid4())

        with patch.object(ConfigService, "update_fine_configuration", return_value=config) as mock_update:
            response = await client.put(
                "/api/v1/config/fines",
                json={"max_fine": "500", "updated_by": admin_id},
            )

        assert response.status_code == 200
        changes = mock_update.await_args.args[0]
        assert changes.model_dump(exclude_none=True) == {"max_fine": Decimal("500")}
        assert str(mock_update.await_args.kwargs["updated_by"]) == admin_id

    @pytest.mark.anyio
    async def test_put_rejects_fixed_rate(self, client: AsyncClient):
        response = await client.put("/api/v1/config/fines", json={"rate_type": "fixed"})

        assert response.status_code == 422

    @pytest.mark.anyio
    async def test_unavailable_returns_503(self, client: AsyncClient):
        error = ConfigurationUnavailableError("Configuração de multas indisponível no momento")

        with patch.object(ConfigService, "update_fine_configuration", side_effect=error):
            response = await client.put("/api/v1/config/fines", json={"grace_period": 1})

        assert response.status_code == 503
        assert response.json()["code"] == "configuration_unavailable"


# ==========================================
# System
# ==========================================

class TestSystemEndpoints:
    """Varredura e reconciliação sob demanda."""

    @pytest.mark.anyio
    async def test_process_overdue_fines(self, client: AsyncClient):
        result = SweepResult(processed_count=2, total_overdue=3, skipped_count=1)

        with patch.object(OverdueSweepService, "process_overdue_fines", return_value=result):
            response = await client.post("/api/v1/system/process-overdue-fines")

        assert response.status_code == 200
        data = response.json()
        assert data["processed_count"] == 2
        assert data["total_overdue"] == 3
        assert data["skipped_count"] == 1
        assert data["cancelled"] is False

    @pytest.mark.anyio
    async def test_reconcile_balances(self, client: AsyncClient, sample_user):
        result = BalanceReconciliation(
            users_checked=4,
            users_corrected=1,
            corrections={sample_user.id: Decimal("70.00")},
        )

        with patch.object(FineService, "reconcile_all_balances", return_value=result):
            response = await client.post("/api/v1/system/reconcile-balances")

        assert response.status_code == 200
        data = response.json()
        assert data["users_corrected"] == 1
        assert str(sample_user.id) in data["corrections"]
