"""GraphQL search adapter.

Exposes ``products(search: String)`` on ``/graphql``:

    query { products(search: "shirt") { totalCount items { sku name } } }

Blocked terms raise a field-level GraphQLError carrying the verdict message
(``extensions.reason`` holds the reason kind); ``data.products`` is null.
"""

from typing import Annotated, Optional

import strawberry
from graphql import GraphQLError
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from searchblocker.adapters.deps import get_search_backend, get_validator, record_verdict
from searchblocker.constants import GRAPHQL_SEARCH_ARGUMENT
from searchblocker.models.block import build_graphql_error
from searchblocker.models.verdict import Channel


@strawberry.type
class ProductItem:
    sku: str
    name: str


@strawberry.type
class Products:
    items: list[ProductItem]
    total_count: int


@strawberry.type
class Query:
    @strawberry.field
    async def products(
        self,
        info: Info,
        term: Annotated[Optional[str], strawberry.argument(name=GRAPHQL_SEARCH_ARGUMENT)] = None,
    ) -> Optional[Products]:
        request = info.context["request"]
        if not getattr(request.app.state, "ready", False):
            raise GraphQLError("SearchBlocker is starting up.")

        decision = get_validator(request).decide(Channel.GRAPHQL, term)
        record_verdict(request, decision)

        if decision.verdict.is_blocked:
            raise build_graphql_error(decision.verdict)

        found = await get_search_backend(request).search(term or "")
        return Products(
            items=[ProductItem(sku=p.sku, name=p.name) for p in found],
            total_count=len(found),
        )


schema = strawberry.Schema(query=Query)


def create_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, path="/graphql")
