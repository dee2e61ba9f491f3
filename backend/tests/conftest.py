import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from book_heaven.api.deps import get_notifier
from book_heaven.db.session import get_db
from book_heaven.main import app
from book_heaven.models import Base, Book, SellPost, User
from book_heaven.models.enums import BookCondition, SellPostStatus, UserRole
from book_heaven.services.notifications import InlineNotifier
from tests.helpers import RecordingNotifier


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


def _user(db: Session, name: str, role: UserRole = UserRole.USER) -> User:
    user = User(name=name, email=f"{name.lower()}@example.com", role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def seller(db):
    return _user(db, "Sam")


@pytest.fixture
def buyer(db):
    return _user(db, "Bea")


@pytest.fixture
def other_buyer(db):
    return _user(db, "Otto")


@pytest.fixture
def admin(db):
    return _user(db, "Ada", UserRole.ADMIN)


@pytest.fixture
def book(db):
    book = Book(title="Dune", author="Frank Herbert")
    db.add(book)
    db.commit()
    db.refresh(book)
    return book


@pytest.fixture
def post(db, seller, book):
    post = SellPost(
        seller_id=seller.id,
        book_id=book.id,
        title="Dune, first paperback",
        price=30.0,
        condition=BookCondition.GOOD,
        status=SellPostStatus.AVAILABLE,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def inline_notifier(db: Session = Depends(get_db)):
        return InlineNotifier(db)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = inline_notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
