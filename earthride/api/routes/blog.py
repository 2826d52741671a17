"""Blog routes: list, batch upsert, single add, delete."""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from earthride.records.blog import BlogPost

from ..deps import Blogs, WriteAccess
from ..errors import ErrorCode, error_response
from ..models import (
    AddBlogResponse,
    BlogBatchRequest,
    BlogListResponse,
    MessageResponse,
    UpsertResponse,
)

router = APIRouter(prefix="/api/blog", tags=["blog"])


@router.get("", response_model=BlogListResponse)
async def list_blogs(store: Blogs):
    return BlogListResponse(data=await store.list())


@router.post("", response_model=UpsertResponse, dependencies=[WriteAccess])
async def save_blogs(body: BlogBatchRequest, store: Blogs):
    result = await store.upsert_batch(body.blogs)
    return UpsertResponse(
        message="Blog data saved successfully",
        updated=result.updated,
        added=result.added,
    )


@router.post(
    "/single",
    response_model=AddBlogResponse,
    dependencies=[WriteAccess],
    responses={409: {"description": "A blog with this title already exists"}},
)
async def add_blog(blog: BlogPost, store: Blogs):
    """Add one post with a fresh id; a duplicate title answers 409."""
    result = await store.add_single(blog)
    if not result.success:
        return JSONResponse(
            status_code=409,
            content=error_response(ErrorCode.CONFLICT, result.message or "Conflict"),
        )
    return AddBlogResponse(success=True, id=result.id)


@router.delete("", response_model=MessageResponse, dependencies=[WriteAccess])
async def delete_blog(
    store: Blogs,
    blog_id: str | None = Query(None, alias="id"),
):
    if not blog_id:
        return JSONResponse(
            status_code=400,
            content=error_response(ErrorCode.VALIDATION_ERROR, "Blog ID is required"),
        )
    try:
        numeric_id = int(blog_id)
    except ValueError:
        return JSONResponse(
            status_code=400,
            content=error_response(ErrorCode.VALIDATION_ERROR, "Blog ID must be an integer"),
        )
    await store.delete(numeric_id)
    return MessageResponse(message="Blog deleted successfully")
