"""
api/routes/v1/accounts.py -- Account registration and listing.

Routes:
  GET  /api/v1/accounts  -- list all accounts (public)
  POST /api/v1/accounts  -- register a new account (public)

Neither route ever returns the password hash: AccountResponse has no field
for it.
"""

from fastapi import APIRouter, Request

from api.models import AccountCreate, AccountResponse
from auth.store import AccountStore

# Auth policy: both routes are public. Registration has to be, and the
# listing exposes nothing beyond the public account projection.
router = APIRouter()


@router.get("/accounts", response_model=list[AccountResponse])
def list_accounts(request: Request) -> list[AccountResponse]:
    """Return every account with its post id back-references."""
    accounts: AccountStore = request.app.state.accounts
    return [AccountResponse.from_account(a) for a in accounts.list()]


@router.post("/accounts", response_model=AccountResponse, status_code=201)
def create_account(request: Request, body: AccountCreate) -> AccountResponse:
    """Register a new account.

    Short usernames/passwords and taken usernames are rejected by the store
    (ValidationFailure / DuplicateKey -> 400 via api/errors.py).
    """
    accounts: AccountStore = request.app.state.accounts
    account = accounts.create(body.username, body.display_name, body.password)
    return AccountResponse.from_account(account)
