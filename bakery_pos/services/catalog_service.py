from sqlalchemy.orm import Session, selectinload

from bakery_pos.models.dessert import ComboItem, Dessert, DessertCombo


def get_dessert(db: Session, dessert_id: int) -> Dessert | None:
    return db.query(Dessert).filter(Dessert.id == dessert_id).first()


def get_desserts(db: Session, dessert_ids: list[int]) -> dict[int, Dessert]:
    if not dessert_ids:
        return {}
    rows = db.query(Dessert).filter(Dessert.id.in_(dessert_ids)).all()
    return {d.id: d for d in rows}


def get_combo(db: Session, combo_id: int) -> DessertCombo | None:
    return (
        db.query(DessertCombo)
        .options(
            selectinload(DessertCombo.base_dessert),
            selectinload(DessertCombo.items).selectinload(ComboItem.dessert),
        )
        .filter(DessertCombo.id == combo_id)
        .first()
    )
