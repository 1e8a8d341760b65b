from pydantic import BaseModel, Field
from typing import Literal, Optional

UNSPENT = "unspent"
SPENT = "spent"
FROZEN = "frozen"

UTXOState = Literal["unspent", "spent", "frozen"]


class UTXOEntry(BaseModel):
    index: int = Field(..., ge=0, description="Position of the output in the record")
    state: UTXOState = Field(UNSPENT, description="Lifecycle state of the output")
    spending_ref: Optional[str] = Field(
        None, description="Reference of the transaction spending this output"
    )
    owner: Optional[str] = Field(None, description="Current owner of the output")
    frozen_from: Optional[Literal["unspent", "spent"]] = Field(
        None, description="State the output held before it was frozen"
    )
    spendable_in: Optional[int] = Field(
        None, description="Block height up to which the output cannot be spent"
    )

    def is_spent(self) -> bool:
        return self.state == SPENT

    def is_frozen(self) -> bool:
        return self.state == FROZEN

    def to_bin(self) -> dict:
        value = {"index": self.index, "state": self.state}
        if self.spending_ref is not None:
            value["spendingRef"] = self.spending_ref
        if self.owner is not None:
            value["owner"] = self.owner
        if self.frozen_from is not None:
            value["frozenFrom"] = self.frozen_from
        if self.spendable_in is not None:
            value["spendableIn"] = self.spendable_in
        return value

    @classmethod
    def from_bin(cls, value: dict) -> "UTXOEntry":
        return cls(
            index=value["index"],
            state=value.get("state", UNSPENT),
            spending_ref=value.get("spendingRef"),
            owner=value.get("owner"),
            frozen_from=value.get("frozenFrom"),
            spendable_in=value.get("spendableIn"),
        )
