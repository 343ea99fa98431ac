from typing import Optional

from fastapi import APIRouter, HTTPException

from storefront.routers.deps import parse_id
from storefront.services.article_service import ArticleNotFoundError, ArticleService

router = APIRouter(prefix="/api/articles", tags=["articles"])
articles = ArticleService()


@router.get("")
def list_articles(category: Optional[str] = None, q: Optional[str] = None):
    return articles.list(category=category, query=q)


@router.get("/categories")
def article_categories():
    return articles.categories()


@router.get("/{article_id}")
def get_article(article_id: str):
    aid = parse_id(article_id, "Article not found")
    try:
        return articles.get(aid)
    except ArticleNotFoundError as exc:
        raise HTTPException(404, str(exc))
