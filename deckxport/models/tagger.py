"""
Scryfall Tagger GraphQL response schema.

Only the fields the import pipeline reads are modelled; everything else in
the response is ignored.
"""

from pydantic import BaseModel, ConfigDict, Field

GOOD_STANDING = "GOOD_STANDING"
ORACLE_CARD_TAG = "ORACLE_CARD_TAG"
ORACLE_TAG_NAMESPACE = "card"


class TaggerTag(BaseModel):
    """A tag and, when requested, its ancestor chain."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    slug: str | None = None
    namespace: str | None = None
    type: str | None = None
    status: str | None = None
    ancestor_tags: list["TaggerTag"] = Field(default_factory=list, alias="ancestorTags")

    @property
    def is_oracle_tag(self) -> bool:
        return self.type == ORACLE_CARD_TAG or self.namespace == ORACLE_TAG_NAMESPACE

    def in_good_standing(self) -> bool:
        """True if this tag and every ancestor is in good standing."""
        if self.status is not None and self.status != GOOD_STANDING:
            return False
        return all(ancestor.in_good_standing() for ancestor in self.ancestor_tags)


class Tagging(BaseModel):
    """Assignment of a tag to a card."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tag: TaggerTag
    status: str | None = None
    type: str | None = None
    weight: str | None = None


class TaggerCard(BaseModel):
    """Tagger's view of one printing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    oracle_id: str | None = Field(default=None, alias="oracleId")
    taggings: list[Tagging] = Field(default_factory=list)


TaggerTag.model_rebuild()
