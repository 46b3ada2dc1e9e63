# tests/conftest.py
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.domain import Project, Resource, ResourceType, Task, WorkPackage
from core.services.leveling import LevelingPolicy
from infra.db.base import Base
from infra.services import build_service_graph


@pytest.fixture
def session():
    # separate in-memory DB for tests
    engine = create_engine("sqlite:///:memory:", future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def policy():
    # Sequential detection keeps log ordering deterministic; parallel runs are tested explicitly.
    return LevelingPolicy(max_workers=1)


@pytest.fixture
def services(session, policy):
    return build_service_graph(session, policy=policy).as_dict()


class ScheduleBuilder:
    """Seeds the store through the repositories the leveling services read from."""

    def __init__(self, services):
        self.session = services["session"]
        self.projects = services["project_repo"]
        self.resources = services["resource_repo"]
        self.tasks = services["task_repo"]
        self.work_packages = services["work_package_repo"]

    def project(self, name="Site A", **extra) -> Project:
        project = Project.create(name, **extra)
        self.projects.add(project)
        self.session.commit()
        return project

    def resource(self, name="Crew 1", type=ResourceType.LABOR, **extra) -> Resource:
        resource = Resource.create(name, type=type, **extra)
        self.resources.add(resource)
        self.session.commit()
        return resource

    def work_package(self, project, name="WP", target_delivery=None, **extra) -> WorkPackage:
        wp = WorkPackage.create(project.id, name, target_delivery=target_delivery, **extra)
        self.work_packages.add(wp)
        self.session.commit()
        return wp

    def task(self, project, name, start, end, resources=(), equipment=(), **extra) -> Task:
        task = Task.create(
            project.id,
            name,
            start_date=start,
            end_date=end,
            assigned_resources=[r.id for r in resources],
            assigned_equipment=[r.id for r in equipment],
            **extra,
        )
        self.tasks.add(task)
        self.session.commit()
        return self.tasks.get(task.id)


@pytest.fixture
def build(services):
    return ScheduleBuilder(services)
