import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, JSONResponse, Response

from shared.datastore import BackupError, JsonFileStore, store_dependency
from .crud import (
    CourseNotFound,
    build_grouped,
    get_course,
    list_courses,
    merge_course,
    rebuild_groups,
    restore_backup,
    save_courses,
)
from .pages import DetailPageRenderer
from .schemas import BackupOut, CourseIn, CourseSummaryOut, GenerateOut, PreviewIn, RestoreIn

logger = logging.getLogger("course-service")


def _failure(error: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def _rebuild_quietly(store: JsonFileStore, grouped_file: Path, records) -> None:
    # the data file is already written; a stale grouped file is recoverable
    try:
        rebuild_groups(store, grouped_file, records)
    except OSError as e:
        logger.warning("Rebuild groups failed: %s", e)


def build_router(store: JsonFileStore, renderer: DetailPageRenderer, grouped_file: Path) -> APIRouter:
    router = APIRouter()
    get_store = store_dependency(store)

    # -------------------------
    # Public reads
    # -------------------------

    @router.get("/courses/", response_model=list[dict])
    def get_all(s: JsonFileStore = Depends(get_store)):
        return list_courses(s)

    @router.get("/courses/grouped", response_model=dict)
    def get_grouped(s: JsonFileStore = Depends(get_store)):
        return build_grouped(list_courses(s))

    # -------------------------
    # Admin
    # -------------------------

    @router.get("/admin/courses", response_model=list[CourseSummaryOut])
    def admin_list(s: JsonFileStore = Depends(get_store)):
        return [
            {"id": None if c.get("id") is None else str(c.get("id")), "title": c.get("title")}
            for c in list_courses(s)
        ]

    @router.get("/admin/course", response_model=dict)
    def admin_get(course_id: str = Query(alias="id", min_length=1), s: JsonFileStore = Depends(get_store)):
        try:
            return get_course(s, course_id)
        except CourseNotFound:
            raise HTTPException(404, "Course not found")

    @router.post("/admin/generate", response_model=GenerateOut)
    def generate(payload: CourseIn, s: JsonFileStore = Depends(get_store)):
        records, merged = merge_course(list_courses(s), payload.model_dump(exclude_unset=True))

        try:
            html = renderer.render(merged)
        except Exception as e:
            logger.exception("Render failed for course %s", merged.get("id"))
            return _failure(f"Render failed: {e}")

        try:
            save_courses(s, records)
        except BackupError as e:
            logger.error("Aborting write: %s", e)
            return _failure(str(e))

        _rebuild_quietly(s, grouped_file, records)

        try:
            path = renderer.write(merged, html)
        except OSError as e:
            logger.error("Course %s saved but its page was not written: %s", merged.get("id"), e)
            return _failure(f"Course saved but page write failed: {e}")
        return {"success": True, "path": path}

    @router.post("/admin/preview", response_class=HTMLResponse)
    def preview(payload: PreviewIn):
        try:
            return HTMLResponse(renderer.render(payload.model_dump(exclude_none=True)))
        except Exception as e:
            logger.exception("Preview render failed")
            return JSONResponse(status_code=500, content={"error": "Preview render failed", "details": str(e)})

    @router.post("/admin/rebuild-groups", response_model=dict)
    def rebuild(s: JsonFileStore = Depends(get_store)):
        try:
            grouped = rebuild_groups(s, grouped_file)
        except OSError as e:
            logger.error("Rebuild groups failed: %s", e)
            return _failure(str(e))
        return {
            "success": True,
            "industryTracks": len(grouped["industryTracks"]),
            "regularTracks": len(grouped["regularTracks"]),
            "totalCourses": grouped["totalCourses"],
        }

    # -------------------------
    # Backups
    # -------------------------

    @router.get("/admin/backups", response_model=list[BackupOut])
    def backups(s: JsonFileStore = Depends(get_store)):
        return s.list_backups()

    @router.get("/admin/backups/{name}")
    def backup_content(name: str, s: JsonFileStore = Depends(get_store)):
        try:
            text = s.read_backup(name)
        except FileNotFoundError:
            raise HTTPException(404, "Backup not found")
        return Response(content=text, media_type="application/json")

    @router.post("/admin/backups/restore", response_model=dict)
    def restore(payload: RestoreIn, s: JsonFileStore = Depends(get_store)):
        try:
            records = restore_backup(s, payload.name)
        except FileNotFoundError:
            raise HTTPException(404, "Backup not found")
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            raise HTTPException(400, f"Invalid backup: {e}")
        except BackupError as e:
            return _failure(str(e))

        _rebuild_quietly(s, grouped_file, records)
        return {"success": True, "restored": payload.name, "totalCourses": len(records)}

    return router

