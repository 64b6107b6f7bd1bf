"""
Erros de domínio do módulo de multas.

Todos herdam de HTTPException para que services continuem levantando
exceções que o FastAPI converte diretamente em respostas HTTP. Cada erro
carrega um `code` estável para que clientes diferenciem os casos sem
depender do texto da mensagem.
"""

from uuid import UUID

from fastapi import HTTPException, status


class LibraryError(HTTPException):
    """Erro base de regra de negócio."""

    code: str = "library_error"
    status_code_default: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(
            status_code=status_code or self.status_code_default,
            detail=detail,
        )


class NotFoundError(LibraryError):
    """Empréstimo, multa ou usuário inexistente."""

    code = "not_found"
    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: UUID | str | None = None):
        self.resource = resource
        self.resource_id = resource_id
        detail = f"{resource} não encontrado"
        if resource_id is not None:
            detail = f"{detail}: {resource_id}"
        super().__init__(detail)


class AlreadyCompletedError(LibraryError):
    """Tentativa de multar um empréstimo já encerrado."""

    code = "already_completed"

    def __init__(self, loan_id: UUID):
        self.loan_id = loan_id
        super().__init__(
            f"Empréstimo {loan_id} já foi encerrado. "
            f"Multas por atraso só podem ser geradas para empréstimos em aberto."
        )


class DuplicateFineError(LibraryError):
    """Já existe multa do mesmo tipo para o empréstimo."""

    code = "duplicate_fine"
    status_code_default = status.HTTP_409_CONFLICT

    def __init__(self, loan_id: UUID, fine_type: str):
        self.loan_id = loan_id
        self.fine_type = fine_type
        super().__init__(
            f"Já existe uma multa do tipo '{fine_type}' para o empréstimo {loan_id}. "
            f"Consulte a multa existente em vez de gerar outra."
        )


class AlreadyPaidError(LibraryError):
    """Pagamento de multa já quitada."""

    code = "already_paid"

    def __init__(self, fine_id: UUID):
        self.fine_id = fine_id
        super().__init__(f"A multa {fine_id} já foi paga.")


class CannotWaivePaidError(LibraryError):
    """Perdão de multa já quitada."""

    code = "cannot_waive_paid"

    def __init__(self, fine_id: UUID):
        self.fine_id = fine_id
        super().__init__(
            f"A multa {fine_id} já foi paga e não pode ser perdoada. "
            f"Para devolver o valor, registre um estorno."
        )


class FineNotPendingError(LibraryError):
    """Operação exige multa pendente (ex.: pagar multa perdoada)."""

    code = "fine_not_pending"

    def __init__(self, fine_id: UUID, current_status: str):
        self.fine_id = fine_id
        self.current_status = current_status
        super().__init__(
            f"A multa {fine_id} está com status '{current_status}' e não pode mais ser alterada."
        )


class ConfigurationUnavailableError(LibraryError):
    """Política de multas indisponível no armazenamento de configuração."""

    code = "configuration_unavailable"
    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE


class InvalidConfigurationError(LibraryError):
    """Valor de configuração inválido ou chave não editável."""

    code = "invalid_configuration"


class InvalidLoanStateError(LibraryError):
    """Empréstimo sem os dados necessários para a operação."""

    code = "invalid_loan_state"
