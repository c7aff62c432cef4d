from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.schemas.expense import ExpenseCreate, ExpenseUpdate, ExpenseOut
from app.services.expense_services import create_expense, delete_expense, update_expense, get_expense_by_id
from app.core.dependencies import get_current_user

router = APIRouter()

@router.post("/", response_model=ExpenseOut, status_code=201)
async def add_expense(data: ExpenseCreate, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await create_expense(db, data, current_user.id)

@router.delete("/{expense_id}")
async def del_expense(expense_id: int, db:AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await delete_expense(db, user_id=current_user.id, expense_id=expense_id)

@router.patch("/{expense_id}", response_model=ExpenseOut)
async def edit(data: ExpenseUpdate, expense_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await update_expense(db, data, expense_id=expense_id, user_id=current_user.id)

@router.get("/{expense_id}", response_model=ExpenseOut)
async def fetch(
    expense_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return await get_expense_by_id(
        db,
        expense_id=expense_id,
        user_id=current_user.id
    )
