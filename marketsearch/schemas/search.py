"""Predictive search API schemas (camelCase JSON envelope)."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from marketsearch.application.dtos.search import (
    CreatorItem,
    ProductItem,
    SearchResponse,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MoneyResponse(_CamelModel):
    amount: str = Field(..., description="Decimal string with two places")
    currency_code: str


class ProductImageResponse(_CamelModel):
    url: str
    alt_text: str
    width: int
    height: int


class ProductVariantResponse(_CamelModel):
    """Single variant: listings have one price and one thumbnail."""

    image: ProductImageResponse | None = None
    price: MoneyResponse


class CreatorSummaryResponse(_CamelModel):
    id: str
    display_name: str
    handle: str


class ProductResponse(_CamelModel):
    id: str
    title: str
    handle: str = Field(..., description="Listing id; products are addressed by id")
    creator: CreatorSummaryResponse | None = None
    variant: ProductVariantResponse

    @classmethod
    def from_item(cls, item: ProductItem) -> "ProductResponse":
        image = item.image
        creator = item.creator
        return cls(
            id=item.id,
            title=item.title,
            handle=item.handle,
            creator=(
                CreatorSummaryResponse(
                    id=creator.id, display_name=creator.display_name, handle=creator.handle
                )
                if creator
                else None
            ),
            variant=ProductVariantResponse(
                image=(
                    ProductImageResponse(
                        url=image.url,
                        alt_text=image.alt_text,
                        width=image.width,
                        height=image.height,
                    )
                    if image
                    else None
                ),
                price=MoneyResponse(
                    amount=item.price.amount, currency_code=item.price.currency_code
                ),
            ),
        )


class CreatorResponse(_CamelModel):
    id: str
    handle: str
    display_name: str
    bio: str | None = None
    profile_image_url: str | None = None
    verification_status: str | None = None

    @classmethod
    def from_item(cls, item: CreatorItem) -> "CreatorResponse":
        return cls(
            id=item.id,
            handle=item.handle,
            display_name=item.display_name,
            bio=item.bio,
            profile_image_url=item.profile_image_url,
            verification_status=item.verification_status,
        )


class SearchItemsResponse(_CamelModel):
    """Items by category. Only creators and products are ever populated."""

    creators: list[CreatorResponse] = Field(default_factory=list)
    products: list[ProductResponse] = Field(default_factory=list)
    articles: list[dict] = Field(default_factory=list)
    collections: list[dict] = Field(default_factory=list)
    pages: list[dict] = Field(default_factory=list)
    queries: list[dict] = Field(default_factory=list)


class SearchResultResponse(_CamelModel):
    total: int
    items: SearchItemsResponse


class PredictiveSearchResponse(_CamelModel):
    """Response for GET /search and GET /search/predictive."""

    term: str = Field(..., description="Normalized search term")
    result: SearchResultResponse

    @classmethod
    def from_dto(cls, response: SearchResponse) -> "PredictiveSearchResponse":
        result = response.result
        return cls(
            term=response.term,
            result=SearchResultResponse(
                total=result.total,
                items=SearchItemsResponse(
                    creators=[CreatorResponse.from_item(c) for c in result.creators],
                    products=[ProductResponse.from_item(p) for p in result.products],
                ),
            ),
        )
