from sqlalchemy import Column, String, Integer, Boolean, Index, UniqueConstraint
from sqlalchemy.orm import Session

from database import DBBaseClass, DBBase, time_now


class Pincode_Rule(DBBase, DBBaseClass):

    __tablename__ = "pincode_rule"

    # store domain, e.g. example.myshopify.com
    shop = Column(String(255), nullable=False)
    # kept as text so leading zeros survive
    pincode = Column(String(6), nullable=False)

    deliverable = Column(Boolean, nullable=False, default=True)
    eta_min_days = Column(Integer, nullable=True)
    eta_max_days = Column(Integer, nullable=True)
    cod_available = Column(Boolean, nullable=False, default=False)
    # whole amount in the smallest currency unit
    shipping_fee = Column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("shop", "pincode", name="uq_pincode_rule_shop_pincode"),
        Index("ix_pincode_rule_shop", "shop"),
    )

    # columns replaced on every upsert
    MUTABLE_FIELDS = (
        "deliverable",
        "eta_min_days",
        "eta_max_days",
        "cod_available",
        "shipping_fee",
    )

    def __repr__(self):
        return f"<Pincode_Rule shop={self.shop} pincode={self.pincode}>"

    @staticmethod
    def upsert_statement(db: Session, shop: str, values: dict):
        """
        INSERT ... ON CONFLICT (shop, pincode) DO UPDATE for one rule.
        Every mutable field is replaced, created_at is left alone.
        """
        if db.get_bind().dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        else:
            from sqlalchemy.dialects.sqlite import insert

        mutable_values = {key: values.get(key) for key in Pincode_Rule.MUTABLE_FIELDS}

        statement = insert(Pincode_Rule).values(
            shop=shop, pincode=values["pincode"], **mutable_values
        )
        return statement.on_conflict_do_update(
            index_elements=["shop", "pincode"],
            set_={**mutable_values, "updated_at": time_now()},
        )

    @staticmethod
    def existing_pincodes(db: Session, shop: str, pincodes, batch_size: int = 1000):
        """Subset of pincodes that already have a rule for this shop."""
        unique_pincodes = list(dict.fromkeys(pincodes))
        existing = set()

        for i in range(0, len(unique_pincodes), batch_size):
            batch = unique_pincodes[i : i + batch_size]
            rows = (
                db.query(Pincode_Rule.pincode)
                .filter(Pincode_Rule.shop == shop, Pincode_Rule.pincode.in_(batch))
                .all()
            )
            existing.update(row.pincode for row in rows)

        return existing

    def to_model(self):
        return {
            "id": str(self.uuid),
            "shop": self.shop,
            "pincode": self.pincode,
            "deliverable": self.deliverable,
            "etaMinDays": self.eta_min_days,
            "etaMaxDays": self.eta_max_days,
            "codAvailable": self.cod_available,
            "shippingFee": self.shipping_fee,
        }
