from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from teamswap.constants import PROJECT_CATEGORIES
from teamswap.database import get_db
from teamswap.schemas.application import ApplicationCreate, ApplicationOut
from teamswap.schemas.project import ProjectCreate, ProjectMemberOut, ProjectOut, ProjectStatsOut, ProjectStatusUpdate
from teamswap.services import application_service, membership_service, project_service
from teamswap.middleware.auth_middleware import get_current_user, get_optional_user
from teamswap.models.user import User

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("", response_model=List[ProjectOut])
def list_projects(
    search: Optional[str] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return project_service.list_projects(db, viewer, search, category)


@router.get("/discover", response_model=List[ProjectOut])
def discover_projects(
    search: Optional[str] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return project_service.discover_projects(db, viewer, search, category)


@router.get("/discover/stats", response_model=ProjectStatsOut)
def discover_project_stats(
    search: Optional[str] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return project_service.discover_stats(db, search, category)


@router.get("/categories", response_model=List[str])
def list_categories():
    return list(PROJECT_CATEGORIES)


@router.post("", response_model=ProjectOut, status_code=201)
def create_project(
    data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return project_service.create_project(db, data, current_user)


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return project_service.get_project(db, project_id, viewer, count_view=True)


@router.patch("/{project_id}/status", response_model=ProjectOut)
def change_status(
    project_id: int,
    data: ProjectStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return project_service.change_status(db, project_id, data.status, current_user)


@router.get("/{project_id}/members", response_model=List[ProjectMemberOut])
def get_members(project_id: int, db: Session = Depends(get_db)):
    return membership_service.get_members(db, project_id)


@router.delete("/{project_id}/members/{user_id}", response_model=ProjectMemberOut)
def remove_member(
    project_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return membership_service.remove_member(db, project_id, user_id, current_user)


@router.post("/{project_id}/leave", response_model=ProjectMemberOut)
def leave_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return membership_service.leave_project(db, project_id, current_user)


@router.post("/{project_id}/applications", response_model=ApplicationOut, status_code=201)
def apply_to_project(
    project_id: int,
    data: ApplicationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return application_service.apply(db, project_id, data, current_user)


@router.get("/{project_id}/applications", response_model=List[ApplicationOut])
def list_project_applications(
    project_id: int,
    status: Optional[str] = "pending",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return application_service.list_for_project(db, project_id, current_user, status)
