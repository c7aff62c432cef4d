from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.jwt_config import create_access_token
from app.db.session import Base, get_db
from app.main import app as fastapi_app
from app.models.user import User
from app.models.group import Group
from app.models.group_member import GroupMember
from app.models.enums import GroupType, MemberRole, MemberStatus, SettlementMode, SplitPolicy
from app.schemas.expense import ExpenseCreate, SplitInput
from app.services.expense_services import create_expense


ALICE, BOB, CAROL, DAVE, ERIN, OUTSIDER = 1, 2, 3, 4, 5, 6

# GROUP-type group, DETAILED by default; Alice is admin, Dave has left
GROUP_ID = 1
# PERSONAL-type group, SIMPLIFIED by default; Alice is admin
PERSONAL_ID = 2


async def _seed(session):
    session.add_all([
        User(id=ALICE, name="Alice", email="alice@example.com"),
        User(id=BOB, name="Bob", email="bob@example.com"),
        User(id=CAROL, name="Carol", email="carol@example.com"),
        User(id=DAVE, name="Dave", email="dave@example.com"),
        User(id=ERIN, name="Erin", email="erin@example.com"),
        User(id=OUTSIDER, name="Oscar", email="oscar@example.com"),
    ])
    session.add_all([
        Group(
            id=GROUP_ID, name="Flat", created_by=ALICE,
            group_type=GroupType.GROUP, settlement_type=SettlementMode.DETAILED,
        ),
        Group(
            id=PERSONAL_ID, name="Trip", created_by=ALICE,
            group_type=GroupType.PERSONAL, settlement_type=SettlementMode.SIMPLIFIED,
        ),
    ])
    await session.flush()
    session.add_all([
        GroupMember(group_id=GROUP_ID, user_id=ALICE, role=MemberRole.ADMIN, status=MemberStatus.ACTIVE),
        GroupMember(group_id=GROUP_ID, user_id=BOB, role=MemberRole.MEMBER, status=MemberStatus.ACTIVE),
        GroupMember(group_id=GROUP_ID, user_id=CAROL, role=MemberRole.MEMBER, status=MemberStatus.ACTIVE),
        GroupMember(group_id=GROUP_ID, user_id=ERIN, role=MemberRole.MEMBER, status=MemberStatus.ACTIVE),
        GroupMember(group_id=GROUP_ID, user_id=DAVE, role=MemberRole.MEMBER, status=MemberStatus.LEFT),
        GroupMember(group_id=PERSONAL_ID, user_id=ALICE, role=MemberRole.ADMIN, status=MemberStatus.ACTIVE),
        GroupMember(group_id=PERSONAL_ID, user_id=BOB, role=MemberRole.MEMBER, status=MemberStatus.ACTIVE),
        GroupMember(group_id=PERSONAL_ID, user_id=CAROL, role=MemberRole.MEMBER, status=MemberStatus.ACTIVE),
    ])
    await session.commit()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(engine):
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        await _seed(session)
    return factory


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user_id: int):
        token = create_access_token({"sub": str(user_id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers


def build_expense(payer, amount, splits, policy=SplitPolicy.EQUAL, group_id=GROUP_ID, **extra):
    """``splits`` is a list of user ids (EQUAL) or (user_id, value) pairs."""
    split_inputs = []
    for item in splits:
        if isinstance(item, tuple):
            user_id, value = item
            if policy == SplitPolicy.PERCENTAGE:
                split_inputs.append(SplitInput(user_id=user_id, percentage=Decimal(value)))
            else:
                split_inputs.append(SplitInput(user_id=user_id, amount=Decimal(value)))
        else:
            split_inputs.append(SplitInput(user_id=item))

    return ExpenseCreate(
        group_id=group_id,
        payer_id=payer,
        amount=Decimal(amount),
        split_policy=policy,
        splits=split_inputs,
        **extra,
    )


@pytest.fixture
def add_expense(db):
    async def _add(payer, amount, splits, policy=SplitPolicy.EQUAL, group_id=GROUP_ID, acting=None, **extra):
        data = build_expense(payer, amount, splits, policy=policy, group_id=group_id, **extra)
        return await create_expense(db, data, acting or payer)
    return _add


@pytest.fixture
async def chain(add_expense):
    """Alice owes Bob 50.00 and Bob owes Carol 50.00."""
    first = await add_expense(BOB, "50.00", [(ALICE, "50.00")], policy=SplitPolicy.AMOUNT, title="Groceries")
    second = await add_expense(CAROL, "50.00", [(BOB, "50.00")], policy=SplitPolicy.AMOUNT, title="Taxi")
    return first, second
