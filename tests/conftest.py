"""Pytest configuration and fixtures for data-client tests."""

from typing import List, Optional

import pytest
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from data_client import (
    DataClientSettings,
    InMemoryDataClient,
    JsonConverter,
    UserScope,
)


class Article(BaseModel):
    """Sample resource used across tests."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: Optional[str] = None
    title: str
    status: str = "draft"
    publish_date: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    views: int = 0


def make_article(title: str, **kwargs) -> Article:
    return Article(title=title, **kwargs)


@pytest.fixture
def settings():
    """Settings with explicit values so the environment cannot leak in."""
    return DataClientSettings(
        base_url="https://api.example.com",
        api_prefix="/api/v1/data",
        user_namespace="users",
        timeout_seconds=5,
        default_page_size=20,
        max_page_size=50,
        user_agent="data-client-tests/1.0",
        auth_token=None,
    )


@pytest.fixture
def article_converter():
    """Converter for the Article sample model."""
    return JsonConverter.for_model(Article)


@pytest.fixture
def memory_client(article_converter, settings):
    """Empty in-memory client for articles."""
    return InMemoryDataClient(article_converter, settings=settings)


@pytest.fixture
def user_one():
    return UserScope("u1")


@pytest.fixture
def user_two():
    return UserScope("u2")


@pytest.fixture
def sample_articles():
    """Articles with overlapping publish dates for sort tests."""
    return [
        make_article("Gamma", status="published", publish_date="2024-03-01", tags=["python"], views=30),
        make_article("Alpha", status="published", publish_date="2024-03-01", tags=["python", "async"], views=10),
        make_article("Delta", status="draft", publish_date="2024-01-15", tags=["rust"], views=0),
        make_article("Beta", status="published", publish_date="2024-05-20", tags=["async"], views=50),
        make_article("Epsilon", status="archived", publish_date="2023-12-31", tags=[], views=5),
        make_article("Zeta", status="published", publish_date="2024-03-01", tags=["python"], views=25),
    ]
