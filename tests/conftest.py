"""
Test configuration and shared fixtures for the entity-facets test suite.
Provides database setup, entity models, the metadata catalog, and sample data.
"""

import pytest
from datetime import datetime
from typing import List
from unittest.mock import AsyncMock, Mock

from fastapi.testclient import TestClient
from sqlalchemy import BigInteger, Boolean, Column, DateTime, Enum, Float, Integer, Numeric, String
from sqlalchemy.dialects import sqlite
from sqlalchemy.orm import declarative_base, sessionmaker

from entity_facets.app import create_app
from entity_facets.core.config import Settings
from entity_facets.core.database import create_database_engine
from entity_facets.facets.service import FacetContext, FacetService
from entity_facets.metadata.catalog import MetadataCatalog
from entity_facets.query.builder import QueryBuilder

PRODUCT_UID = "api::product.product"
ARTICLE_UID = "api::article.article"

Base = declarative_base()


class Product(Base):
    """Entity with a publication timestamp."""

    __tablename__ = "product"

    id = Column(Integer, primary_key=True)
    name = Column(String(50))
    price = Column(Numeric(10, 2))
    publishedAt = Column("published_at", DateTime, nullable=True)


class Article(Base):
    """Entity without a publication timestamp, covering every facet type."""

    __tablename__ = "article"

    id = Column(Integer, primary_key=True)
    title = Column(String(100))
    category = Column(Enum("news", "review", "guide", name="article_category"))
    featured = Column(Boolean)
    views = Column(Integer)
    rating = Column(Float)
    wordCount = Column("word_count", BigInteger)
    createdAt = Column("created_at", DateTime)


# ===== CATALOG AND QUERY BUILDER =====

@pytest.fixture
def catalog() -> MetadataCatalog:
    """Catalog with the Product and Article entity types registered"""
    catalog = MetadataCatalog()
    catalog.register(PRODUCT_UID, Product)
    catalog.register(ARTICLE_UID, Article)
    return catalog


@pytest.fixture
def product_meta(catalog):
    return catalog.get(PRODUCT_UID)


@pytest.fixture
def article_meta(catalog):
    return catalog.get(ARTICLE_UID)


@pytest.fixture
def query_builder(catalog) -> QueryBuilder:
    """Query builder compiling for SQLite without a database"""
    return QueryBuilder(catalog, sqlite.dialect())


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(database_url=f"sqlite:///{tmp_path / 'facets.db'}", max_facet_values=256)


# ===== MOCKED BACKEND =====

@pytest.fixture
def mock_sql_executor():
    """SQL executor whose execute coroutine is an AsyncMock"""
    executor = Mock()
    executor.execute = AsyncMock(return_value=[])
    return executor


@pytest.fixture
def mock_facet_service(catalog, query_builder, mock_sql_executor, settings) -> FacetService:
    """Facet service wired to the mocked SQL executor"""
    context = FacetContext(
        catalog=catalog,
        query_builder=query_builder,
        sql_executor=mock_sql_executor,
        settings=settings,
    )
    return FacetService(context)


# ===== DATABASE SETUP =====

@pytest.fixture
def engine(settings):
    """File-backed SQLite engine so concurrent facet queries get their own connections"""
    engine = create_database_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def facet_context(catalog, engine, settings) -> FacetContext:
    return FacetContext.from_engine(catalog, engine, settings)


@pytest.fixture
def facet_service(facet_context) -> FacetService:
    return FacetService(facet_context)


@pytest.fixture
def client(facet_context):
    """FastAPI test client serving the facet context"""
    app = create_app(context=facet_context)
    with TestClient(app) as test_client:
        yield test_client


# ===== SAMPLE DATA FIXTURES =====

@pytest.fixture
def sample_products(db_session) -> List[Product]:
    """Ten published products (6 named A, 4 named B) and two unpublished ones"""
    published = datetime(2024, 1, 1)
    prices = [5, 10, 20, 30, 40, 50, 60, 70, 80, 99]
    products = []
    for index, price in enumerate(prices, start=1):
        products.append(
            Product(id=index, name="A" if index <= 6 else "B", price=price, publishedAt=published)
        )
    products.append(Product(id=11, name="C", price=500, publishedAt=None))
    products.append(Product(id=12, name="C", price=1, publishedAt=None))

    db_session.add_all(products)
    db_session.commit()
    return products


@pytest.fixture
def sample_articles(db_session) -> List[Article]:
    """Articles with a null rating, mixed categories and a constant word count"""
    articles = [
        Article(id=1, title="First look", category="news", featured=True, views=10, rating=4.5, wordCount=1000,
                createdAt=datetime(2024, 1, 1)),
        Article(id=2, title="Deep dive", category="review", featured=False, views=250, rating=3.0, wordCount=1000,
                createdAt=datetime(2024, 1, 2)),
        Article(id=3, title="How to", category="guide", featured=False, views=40, rating=None, wordCount=1000,
                createdAt=datetime(2024, 1, 3)),
        Article(id=4, title="Breaking", category="news", featured=True, views=5, rating=5.0, wordCount=1000,
                createdAt=datetime(2024, 1, 4)),
    ]
    db_session.add_all(articles)
    db_session.commit()
    return articles
