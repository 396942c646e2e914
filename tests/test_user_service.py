import pytest
from bson import ObjectId

from accounts_api.application.services.user_service import (
    create_user,
    get_user,
    get_user_by_credential_name,
    get_users,
    is_valid_password,
    remove_user,
    update_user,
)
from accounts_api.core.exceptions import (
    ConflictException,
    EntityNotFoundException,
    ImmutableFieldException,
    InvalidArgumentException,
)
from accounts_api.core.security import hash_password
from accounts_api.domain.models.user import Role
from accounts_api.domain.schemas.user import UserUpdate

pytestmark = pytest.mark.anyio


async def seed_users(db, count: int):
    password = hash_password("password123")
    await db["users"].insert_many(
        [
            {
                "name": f"User {i:02d}",
                "email": f"user{i:02d}@example.com",
                "password": password,
                "age": 20 + i,
                "gender": "female" if i % 2 else "male",
                "role": "user",
                "isDeleted": False,
            }
            for i in range(count)
        ]
    )


async def test_create_hashes_password_and_records_actor(repo, db, actor, make_user_create):
    created = await create_user(repo, make_user_create(), actor)

    stored = await db["users"].find_one({"_id": created.id})
    assert stored["email"] == "nguyenvana@example.com"
    assert stored["password"] != "password123"
    assert is_valid_password("password123", stored["password"])
    assert stored["createdBy"] == {"_id": actor.id, "email": actor.email}
    assert stored["isDeleted"] is False
    assert stored["createdAt"] is not None


async def test_create_duplicate_email_conflicts(repo, make_user_create):
    await create_user(repo, make_user_create())

    with pytest.raises(ConflictException):
        await create_user(repo, make_user_create(name="Someone Else"))


async def test_email_of_soft_deleted_user_can_be_reused(repo, make_user_create):
    first = await create_user(repo, make_user_create())
    await remove_user(repo, str(first.id))

    second = await create_user(repo, make_user_create())
    assert second.id != first.id


async def test_find_all_paginates(repo, db):
    await seed_users(db, 25)

    page = await get_users(repo, 1, 10, "")

    assert page["meta"] == {"current": 1, "page_size": 10, "pages": 3, "total": 25}
    assert len(page["result"]) == 10
    assert all(user.password is None for user in page["result"])


async def test_find_all_last_page_and_default_size(repo, db):
    await seed_users(db, 25)

    last = await get_users(repo, 3, 10, "current=3&pageSize=10")
    assert len(last["result"]) == 5

    defaulted = await get_users(repo, 1, 0, "")
    assert defaulted["meta"]["page_size"] == 10
    assert len(defaulted["result"]) == 10


async def test_find_all_applies_filter_and_sort(repo, db):
    await seed_users(db, 25)

    page = await get_users(repo, 1, 10, "gender=male&age>=40&sort=-age")

    ages = [user.age for user in page["result"]]
    assert page["meta"]["total"] == len(ages) == 3
    assert ages == sorted(ages, reverse=True)
    assert all(user.gender == "male" for user in page["result"])


async def test_find_all_populates_role(repo, db, make_user_create):
    role_id = (await db["roles"].insert_one({"name": "EDITOR", "description": "edit access"})).inserted_id
    await create_user(repo, make_user_create(email="editor@example.com", role=str(role_id)))
    await create_user(repo, make_user_create(email="plain@example.com", role="user"))

    page = await get_users(repo, 1, 10, "populate=role&sort=email")

    editor, plain = page["result"]
    assert editor.role == Role(id=role_id, name="EDITOR")
    assert plain.role == "user"

    unpopulated = await get_users(repo, 1, 10, "email=editor@example.com")
    assert unpopulated["result"][0].role == str(role_id)


@pytest.mark.parametrize("current", [0, -1])
async def test_find_all_rejects_non_positive_page(repo, current):
    with pytest.raises(InvalidArgumentException):
        await get_users(repo, current, 10, "")


async def test_find_one_validates_id(repo):
    with pytest.raises(InvalidArgumentException):
        await get_user(repo, "abc")


async def test_find_one_missing_is_not_found(repo):
    with pytest.raises(EntityNotFoundException):
        await get_user(repo, str(ObjectId()))


async def test_find_one_omits_password(repo, make_user_create):
    created = await create_user(repo, make_user_create())

    found = await get_user(repo, str(created.id))

    assert found.email == created.email
    assert found.password is None


async def test_update_rejects_email_change(repo, make_user_create):
    created = await create_user(repo, make_user_create())

    with pytest.raises(ImmutableFieldException):
        await update_user(repo, str(created.id), UserUpdate(email="new@example.com"))


async def test_update_rejects_malformed_id(repo):
    with pytest.raises(InvalidArgumentException):
        await update_user(repo, "abc", UserUpdate(name="New"))


async def test_update_applies_only_supplied_fields(repo, db, actor, make_user_create):
    created = await create_user(repo, make_user_create())

    result = await update_user(repo, str(created.id), UserUpdate(name="Tran Thi B", age=30), actor)

    assert result.matched_count == 1
    assert result.modified_count == 1
    stored = await db["users"].find_one({"_id": created.id})
    assert stored["name"] == "Tran Thi B"
    assert stored["age"] == 30
    assert stored["email"] == "nguyenvana@example.com"
    assert stored["address"] == "123 Main St, City, Country"
    assert stored["updatedBy"] == {"_id": actor.id, "email": actor.email}


async def test_update_missing_user_matches_nothing(repo):
    result = await update_user(repo, str(ObjectId()), UserUpdate(name="Nobody"))

    assert result.matched_count == 0
    assert result.modified_count == 0


async def test_remove_is_soft_and_idempotent(repo, db, actor, make_user_create):
    keep = await create_user(repo, make_user_create(email="keep@example.com"))
    gone = await create_user(repo, make_user_create(email="gone@example.com"))

    first = await remove_user(repo, str(gone.id), actor)
    second = await remove_user(repo, str(gone.id), actor)

    assert first.deleted == 1
    assert second.deleted == 0

    page = await get_users(repo, 1, 10, "")
    assert [user.id for user in page["result"]] == [keep.id]
    assert page["meta"]["total"] == 1

    stored = await db["users"].find_one({"_id": gone.id})
    assert stored["isDeleted"] is True
    assert stored["deletedAt"] is not None
    assert stored["deletedBy"]["email"] == actor.email

    with pytest.raises(EntityNotFoundException):
        await get_user(repo, str(gone.id))


async def test_remove_with_malformed_id_is_a_noop(repo):
    result = await remove_user(repo, "abc")

    assert result.deleted == 0


async def test_credential_lookup_populates_role_name(repo, db, make_user_create):
    role_id = (await db["roles"].insert_one({"name": "ADMIN", "description": "all access"})).inserted_id
    await create_user(repo, make_user_create(role=str(role_id)))

    user = await get_user_by_credential_name(repo, "nguyenvana@example.com")

    assert user.role.id == role_id
    assert user.role.name == "ADMIN"
    assert is_valid_password("password123", user.password)


async def test_credential_lookup_keeps_free_text_role(repo, make_user_create):
    await create_user(repo, make_user_create(role="user"))

    user = await get_user_by_credential_name(repo, "nguyenvana@example.com")

    assert user.role == "user"


async def test_credential_lookup_misses(repo):
    assert await get_user_by_credential_name(repo, "nobody@example.com") is None
