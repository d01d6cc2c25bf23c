"""Contract tests run against every record store backend."""

import json

import pytest

from conftest import OTHER_OWNER, OWNER, make_new_loo7, make_new_student
from hifz.config.app_config import StorageConfig
from hifz.core.errors import NotFoundError, StoreError
from hifz.db.blob_store import BlobStore, DirectoryBlobNamespace
from hifz.db.factory import create_store
from hifz.db.memory_store import MemoryStore
from hifz.db.sqlite_store import SQLiteStore


class TestStudents:
    """Student CRUD."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, store):
        student = await store.create_student(
            make_new_student("Ahmad", age=11, contact="0550", notes="hafs"), OWNER
        )

        fetched = await store.get_student(student.id, OWNER)

        assert fetched == student
        assert fetched.owner_id == OWNER
        assert fetched.age == 11
        assert fetched.created_at == fetched.updated_at

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get_student("missing", OWNER) is None

    @pytest.mark.asyncio
    async def test_other_owner_cannot_see(self, store):
        student = await store.create_student(make_new_student(), OWNER)

        assert await store.get_student(student.id, OTHER_OWNER) is None
        assert await store.get_all_students(OTHER_OWNER) == []

    @pytest.mark.asyncio
    async def test_list_sorted_by_name(self, store):
        for name in ["yusuf", "Bilal", "adam"]:
            await store.create_student(make_new_student(name), OWNER)

        names = [s.name for s in await store.get_all_students(OWNER)]

        assert names == ["adam", "Bilal", "yusuf"]

    @pytest.mark.asyncio
    async def test_update_partial(self, store):
        student = await store.create_student(make_new_student("Ahmad", age=10), OWNER)

        updated = await store.update_student(student.id, {"notes": "warsh"}, OWNER)

        assert updated.notes == "warsh"
        assert updated.age == 10
        assert updated.name == "Ahmad"
        assert updated.updated_at >= student.updated_at
        assert await store.get_student(student.id, OWNER) == updated

    @pytest.mark.asyncio
    async def test_update_ignores_protected_fields(self, store):
        student = await store.create_student(make_new_student(), OWNER)

        updated = await store.update_student(
            student.id, {"id": "other", "owner_id": OTHER_OWNER}, OWNER
        )

        assert updated.id == student.id
        assert updated.owner_id == OWNER

    @pytest.mark.asyncio
    async def test_update_missing_or_foreign(self, store):
        student = await store.create_student(make_new_student(), OWNER)

        assert await store.update_student("missing", {"age": 1}, OWNER) is None
        assert await store.update_student(student.id, {"age": 1}, OTHER_OWNER) is None

    @pytest.mark.asyncio
    async def test_delete_cascades_only_own_loo7s(self, store):
        """Deleting a student removes all of its loo7s and no others."""
        a = await store.create_student(make_new_student("A"), OWNER)
        b = await store.create_student(make_new_student("B"), OWNER)
        await store.create_loo7(make_new_loo7(a.id), OWNER)
        await store.create_loo7(make_new_loo7(a.id, recitation_date="2024-03-11"), OWNER)
        kept = await store.create_loo7(make_new_loo7(b.id), OWNER)

        assert await store.delete_student(a.id, OWNER) is True

        assert await store.get_student(a.id, OWNER) is None
        assert [loo7.id for loo7 in await store.get_all_loo7(OWNER)] == [kept.id]

    @pytest.mark.asyncio
    async def test_delete_foreign_student(self, store):
        student = await store.create_student(make_new_student(), OWNER)

        assert await store.delete_student(student.id, OTHER_OWNER) is False
        assert await store.get_student(student.id, OWNER) is not None


class TestLoo7s:
    """Loo7 CRUD and queries."""

    @pytest.mark.asyncio
    async def test_create_pending(self, store):
        student = await store.create_student(make_new_student(), OWNER)

        loo7 = await store.create_loo7(make_new_loo7(student.id), OWNER)

        assert loo7.status == "pending"
        assert loo7.score is None
        assert loo7.completed_at is None
        assert loo7.created_at
        assert await store.get_loo7(loo7.id, OWNER) == loo7

    @pytest.mark.asyncio
    async def test_create_for_unknown_student(self, store):
        """No orphan loo7s: the student must exist for the owner."""
        with pytest.raises(NotFoundError):
            await store.create_loo7(make_new_loo7("missing"), OWNER)

    @pytest.mark.asyncio
    async def test_create_for_foreign_student(self, store):
        student = await store.create_student(make_new_student(), OTHER_OWNER)

        with pytest.raises(NotFoundError):
            await store.create_loo7(make_new_loo7(student.id), OWNER)

    @pytest.mark.asyncio
    async def test_get_foreign_loo7(self, store):
        student = await store.create_student(make_new_student(), OWNER)
        loo7 = await store.create_loo7(make_new_loo7(student.id), OWNER)

        assert await store.get_loo7(loo7.id, OTHER_OWNER) is None
        assert await store.get_all_loo7(OTHER_OWNER) == []

    @pytest.mark.asyncio
    async def test_by_date(self, store):
        student = await store.create_student(make_new_student(), OWNER)
        today = await store.create_loo7(make_new_loo7(student.id), OWNER)
        await store.create_loo7(make_new_loo7(student.id, recitation_date="2024-03-11"), OWNER)

        result = await store.get_loo7_by_date("2024-03-10", OWNER)

        assert [loo7.id for loo7 in result] == [today.id]

    @pytest.mark.asyncio
    async def test_by_student_and_date_ordered(self, store):
        """Results come back new, near_past, far_past regardless of insertion."""
        a = await store.create_student(make_new_student("A"), OWNER)
        b = await store.create_student(make_new_student("B"), OWNER)
        for loo7_type in ["far_past", "near_past", "new"]:
            await store.create_loo7(make_new_loo7(a.id, type=loo7_type), OWNER)
        await store.create_loo7(make_new_loo7(b.id), OWNER)
        await store.create_loo7(make_new_loo7(a.id, recitation_date="2024-03-11"), OWNER)

        result = await store.get_loo7_by_student_and_date(a.id, "2024-03-10", OWNER)

        assert [loo7.type for loo7 in result] == ["new", "near_past", "far_past"]
        assert {loo7.student_id for loo7 in result} == {a.id}

    @pytest.mark.asyncio
    async def test_same_type_keeps_date_listing_order(self, store):
        """Loo7s of one type keep the relative order they have in the day listing."""
        student = await store.create_student(make_new_student(), OWNER)
        for loo7_type in ["new", "near_past", "new", "far_past", "new", "near_past"]:
            await store.create_loo7(make_new_loo7(student.id, type=loo7_type), OWNER)

        by_date = await store.get_loo7_by_date("2024-03-10", OWNER)
        by_student = await store.get_loo7_by_student_and_date(student.id, "2024-03-10", OWNER)

        for loo7_type in ["new", "near_past", "far_past"]:
            expected = [loo7.id for loo7 in by_date if loo7.type == loo7_type]
            assert [loo7.id for loo7 in by_student if loo7.type == loo7_type] == expected
        assert len(by_student) == 6

    @pytest.mark.asyncio
    async def test_by_student_and_date_foreign(self, store):
        student = await store.create_student(make_new_student(), OWNER)
        await store.create_loo7(make_new_loo7(student.id), OWNER)

        assert await store.get_loo7_by_student_and_date(student.id, "2024-03-10", OTHER_OWNER) == []

    @pytest.mark.asyncio
    async def test_update(self, store):
        student = await store.create_student(make_new_student(), OWNER)
        loo7 = await store.create_loo7(make_new_loo7(student.id), OWNER)

        updated = await store.update_loo7(
            loo7.id,
            {
                "status": "completed",
                "score": "good",
                "score_notes": "ok",
                "completed_at": "2024-03-10T10:00:00+00:00",
            },
            OWNER,
        )

        assert updated.status == "completed"
        assert updated.score == "good"
        assert updated.surah_name == loo7.surah_name
        assert await store.get_loo7(loo7.id, OWNER) == updated

    @pytest.mark.asyncio
    async def test_update_missing_or_foreign(self, store):
        student = await store.create_student(make_new_student(), OWNER)
        loo7 = await store.create_loo7(make_new_loo7(student.id), OWNER)

        assert await store.update_loo7("missing", {"score": "good"}, OWNER) is None
        assert await store.update_loo7(loo7.id, {"score": "good"}, OTHER_OWNER) is None

    @pytest.mark.asyncio
    async def test_delete(self, store):
        student = await store.create_student(make_new_student(), OWNER)
        loo7 = await store.create_loo7(make_new_loo7(student.id), OWNER)

        assert await store.delete_loo7(loo7.id, OTHER_OWNER) is False
        assert await store.delete_loo7(loo7.id, OWNER) is True
        assert await store.get_loo7(loo7.id, OWNER) is None
        assert await store.delete_loo7(loo7.id, OWNER) is False


class TestSQLiteStore:
    """Backend-specific behavior of SQLiteStore."""

    @pytest.mark.asyncio
    async def test_data_survives_reopen(self, tmp_path):
        db_path = tmp_path / "hifz.db"
        first = SQLiteStore(db_path)
        student = await first.create_student(make_new_student(), OWNER)

        reopened = SQLiteStore(db_path)

        assert await reopened.get_student(student.id, OWNER) == student

    def test_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "hifz.db"
        SQLiteStore(db_path)
        assert db_path.exists()

    @pytest.mark.asyncio
    async def test_unknown_status_rejected_by_schema(self, tmp_path):
        store = SQLiteStore(tmp_path / "hifz.db")
        student = await store.create_student(make_new_student(), OWNER)
        loo7 = await store.create_loo7(make_new_loo7(student.id), OWNER)

        with pytest.raises(StoreError):
            await store.update_loo7(loo7.id, {"status": "archived"}, OWNER)

        assert (await store.get_loo7(loo7.id, OWNER)).status == "pending"


class TestBlobStore:
    """Backend-specific behavior of BlobStore."""

    @pytest.mark.asyncio
    async def test_blob_keys(self, tmp_path):
        store = BlobStore.in_directory(tmp_path)
        student = await store.create_student(make_new_student(), OWNER)
        loo7 = await store.create_loo7(make_new_loo7(student.id), OWNER)

        assert store.students.list_keys() == [f"student:{student.id}"]
        assert store.loo7s.list_keys() == [f"loo7:{loo7.id}"]

    @pytest.mark.asyncio
    async def test_arabic_text_kept(self, tmp_path):
        store = BlobStore.in_directory(tmp_path)
        student = await store.create_student(make_new_student("عبد الله"), OWNER)

        assert (await store.get_student(student.id, OWNER)).name == "عبد الله"

    @pytest.mark.asyncio
    async def test_corrupt_blob_raises_store_error(self, tmp_path):
        store = BlobStore.in_directory(tmp_path)
        student = await store.create_student(make_new_student(), OWNER)
        for path in (tmp_path / "students").glob("*.json"):
            path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StoreError):
            await store.get_student(student.id, OWNER)

    def test_namespace_round_trip(self, tmp_path):
        namespace = DirectoryBlobNamespace(tmp_path / "ns")
        namespace.set_json("loo7:abc", {"a": 1})

        assert namespace.get_json("loo7:abc") == {"a": 1}
        assert json.loads(next((tmp_path / "ns").glob("*.json")).read_text()) == {"a": 1}
        assert namespace.delete("loo7:abc") is True
        assert namespace.delete("loo7:abc") is False
        assert namespace.get_json("loo7:abc") is None


class TestCreateStore:
    """Tests for the backend factory."""

    def test_memory(self):
        assert isinstance(create_store(StorageConfig(backend="memory")), MemoryStore)

    def test_sqlite(self, tmp_path):
        store = create_store(StorageConfig(backend="sqlite", sqlite_path=tmp_path / "x.db"))
        assert isinstance(store, SQLiteStore)

    def test_blobs(self, tmp_path):
        store = create_store(StorageConfig(backend="blobs", blobs_dir=tmp_path / "b"))
        assert isinstance(store, BlobStore)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_store(StorageConfig(backend="postgres"))
