"""Article (tech news) lookups."""

from __future__ import annotations

from typing import Optional

from storefront.db.models import Article
from storefront.repositories.sql_repository import SQLRepository


class ArticleNotFoundError(Exception):
    pass


def display_date(value) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def article_to_dict(entity: Article, *, with_content: bool = True) -> dict:
    data = {
        "id": entity.id,
        "title": entity.title,
        "summary": entity.summary,
        "category": entity.category,
        "publishedOn": entity.published_on.isoformat(),
        "date": display_date(entity.published_on),
        "image": entity.image,
    }
    if with_content:
        data["content"] = entity.content
    return data


class ArticleService:
    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    def list(self, category: Optional[str] = None, query: Optional[str] = None) -> list[dict]:
        articles = self.repository.list_articles()
        if category:
            articles = [a for a in articles if a.category == category]
        term = (query or "").strip().lower()
        if term:
            articles = [a for a in articles if term in a.title.lower() or term in a.summary.lower()]
        return [article_to_dict(a, with_content=False) for a in articles]

    def categories(self) -> list[str]:
        seen: dict[str, None] = {}
        for article in self.repository.list_articles():
            seen.setdefault(article.category, None)
        return list(seen)

    def get(self, article_id: int) -> dict:
        entity = self.repository.get_article(article_id)
        if not entity:
            raise ArticleNotFoundError("Article not found")
        return article_to_dict(entity)
