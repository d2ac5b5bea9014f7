"""FastAPI application exposing the ledger over HTTP."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from bankledger.accounting.models import Account, Transaction
from bankledger.config import LedgerSettings, get_settings
from bankledger.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    LedgerError,
)
from bankledger.schemas import (
    AccountCreate,
    AccountResponse,
    AmountRequest,
    ErrorResponse,
    OperationResponse,
    StatementResponse,
    TransactionModel,
    TransferRequest,
)
from bankledger.service import LedgerService

_settings = get_settings()

app = FastAPI(title=_settings.app_name, version="0.1.0")

NOT_FOUND: Dict[int | str, Dict[str, Any]] = {404: {"model": ErrorResponse}}
REJECTED: Dict[int | str, Dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def get_service(settings: LedgerSettings = Depends(get_settings)) -> LedgerService:
    service = getattr(app.state, "service", None)
    if service is None:
        service = LedgerService(settings=settings)
        app.state.service = service
    return service


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    if isinstance(exc, AccountNotFoundError):
        status_code = 404
    elif isinstance(exc, InsufficientFundsError):
        status_code = 409
    else:
        status_code = 400
    content = ErrorResponse(detail=str(exc), code=exc.code)
    return JSONResponse(status_code=status_code, content=content.model_dump())


@app.get("/api/accounts", response_model=List[AccountResponse])
def list_accounts(service: LedgerService = Depends(get_service)) -> List[AccountResponse]:
    return [_account_response(account) for account in service.list_snapshots()]


@app.post(
    "/api/accounts",
    response_model=AccountResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
def create_account(
    payload: AccountCreate,
    service: LedgerService = Depends(get_service),
) -> AccountResponse:
    return _account_response(service.open_account(payload.owner).snapshot())


@app.get("/api/accounts/{account_id}", response_model=AccountResponse, responses=NOT_FOUND)
def get_account(account_id: str, service: LedgerService = Depends(get_service)) -> AccountResponse:
    return _account_response(service.snapshot(account_id))


@app.post(
    "/api/accounts/{account_id}/deposit", response_model=OperationResponse, responses=REJECTED
)
def deposit(
    account_id: str,
    payload: AmountRequest,
    service: LedgerService = Depends(get_service),
) -> OperationResponse:
    record = service.deposit(account_id, payload.amount)
    return _operation_response(service.snapshot(account_id), [record])


@app.post(
    "/api/accounts/{account_id}/withdraw", response_model=OperationResponse, responses=REJECTED
)
def withdraw(
    account_id: str,
    payload: AmountRequest,
    service: LedgerService = Depends(get_service),
) -> OperationResponse:
    record = service.withdraw(account_id, payload.amount)
    return _operation_response(service.snapshot(account_id), [record])


@app.post(
    "/api/accounts/{account_id}/transfer", response_model=OperationResponse, responses=REJECTED
)
def transfer(
    account_id: str,
    payload: TransferRequest,
    service: LedgerService = Depends(get_service),
) -> OperationResponse:
    outgoing, _ = service.transfer(account_id, payload.destination_id, payload.amount)
    return _operation_response(service.snapshot(account_id), [outgoing])


@app.get(
    "/api/accounts/{account_id}/history",
    response_model=List[TransactionModel],
    responses=NOT_FOUND,
)
def history(account_id: str, service: LedgerService = Depends(get_service)) -> List[TransactionModel]:
    return _transaction_models(service.snapshot(account_id).history)


@app.get("/api/accounts/{account_id}/statement", response_model=None, responses=NOT_FOUND)
def statement(
    account_id: str,
    fmt: str = Query(default="text", alias="format"),
    service: LedgerService = Depends(get_service),
) -> PlainTextResponse | StatementResponse:
    if fmt == "json":
        return StatementResponse(**service.statement_data(account_id))
    return PlainTextResponse(service.statement(account_id))


def _account_response(account: Account) -> AccountResponse:
    return AccountResponse.model_validate(account)


def _transaction_models(records: Iterable[Transaction]) -> List[TransactionModel]:
    return [
        TransactionModel(
            kind=str(getattr(record.kind, "value", record.kind)),
            amount=record.amount,
            timestamp=record.timestamp,
            counterparty=record.counterparty,
        )
        for record in records
    ]


def _operation_response(account: Account, records: Iterable[Transaction]) -> OperationResponse:
    return OperationResponse(
        account=_account_response(account),
        transactions=_transaction_models(records),
    )


__all__ = ["app", "get_service"]
