import io
import os
import unittest

from fakes import MASTER_ID, FakeDrive

from drivevault.errors import (
    ForbiddenScopeError,
    InvalidFolderIdError,
    InvalidInputError,
    NotFoundError,
    UpstreamUnavailableError,
)
from drivevault.identity import CallerIdentity
from drivevault.models import UploadSource
from drivevault.service import VaultService, clean_upload_filename, spooled_upload

U1 = CallerIdentity("u1")
U2 = CallerIdentity("u2")


class TestVaultService(unittest.TestCase):
    def setUp(self) -> None:
        self.drive = FakeDrive()
        self.service = VaultService(self.drive, MASTER_ID)

    def _upload(self, caller, name="a.txt", data=b"hello", folder_id=None):
        source = UploadSource(filename=name, stream=io.BytesIO(data), mime_type="text/plain")
        return self.service.upload_files(caller, [source], folder_id=folder_id)

    def test_initialize_is_idempotent(self) -> None:
        first = self.service.initialize_user(U1)
        second = self.service.initialize_user(U1)
        self.assertEqual(first.folder_id, second.folder_id)
        self.assertIn(MASTER_ID, self.drive.items[first.folder_id].parents)
        self.assertEqual(self.drive.items[first.folder_id].name, "Vault_u1")

    def test_operations_require_initialized_user(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            self.service.list_files(U1)
        self.assertEqual(ctx.exception.message, "User folder not found")

    def test_upload_trash_restore_scenario(self) -> None:
        root = self.service.initialize_user(U1).folder_id

        uploaded = self._upload(U1)
        self.assertEqual(len(uploaded), 1)
        file_id = uploaded[0].file_id
        self.assertEqual(uploaded[0].parents, [root])
        self.assertEqual(self.drive.contents[file_id], b"hello")

        listing = self.service.list_files(U1)
        self.assertEqual([f.file_id for f in listing.files], [file_id])
        self.assertEqual(listing.current_folder_id, root)
        self.assertEqual(listing.root_folder_id, root)

        self.service.delete_item(U1, file_id)
        self.assertEqual(self.service.list_files(U1).files, [])
        trash = self.service.list_files(U1, view="trash")
        self.assertEqual([f.file_id for f in trash.files], [file_id])

        self.service.restore_item(U1, file_id)
        self.assertEqual([f.file_id for f in self.service.list_files(U1).files], [file_id])
        self.assertEqual(self.service.list_files(U1, view="trash").files, [])

    def test_other_user_cannot_touch_items(self) -> None:
        self.service.initialize_user(U1)
        self.service.initialize_user(U2)
        file_id = self._upload(U1)[0].file_id
        folder_u1 = self.service.create_folder(U1, "Docs").file_id

        for op in (
            lambda: self.service.delete_item(U2, file_id),
            lambda: self.service.restore_item(U2, file_id),
            lambda: self.service.rename_item(U2, file_id, "stolen.txt"),
            lambda: self.service.list_files(U2, folder_id=folder_u1),
            lambda: self.service.create_folder(U2, "x", parent_id=folder_u1),
            lambda: self._upload(U2, folder_id=folder_u1),
        ):
            with self.assertRaises(ForbiddenScopeError):
                op()

        self.assertFalse(self.drive.items[file_id].trashed)
        self.assertEqual(self.drive.items[file_id].name, "a.txt")
        self.assertEqual(self.service.list_files(U2).files, [])

    def test_master_folder_id_falls_back_to_root(self) -> None:
        root = self.service.initialize_user(U1).folder_id
        listing = self.service.list_files(U1, folder_id=MASTER_ID)
        self.assertEqual(listing.current_folder_id, root)

    def test_root_folder_cannot_be_deleted(self) -> None:
        root = self.service.initialize_user(U1).folder_id
        with self.assertRaises(ForbiddenScopeError):
            self.service.delete_item(U1, root)

    def test_list_navigates_subfolders(self) -> None:
        self.service.initialize_user(U1)
        docs = self.service.create_folder(U1, "  Docs  ")
        self.assertEqual(docs.name, "Docs")
        nested = self.service.create_folder(U1, "Nested", parent_id=docs.file_id)
        self._upload(U1, name="in-docs.txt", folder_id=docs.file_id)

        listing = self.service.list_files(U1, folder_id=docs.file_id)
        self.assertEqual(listing.current_folder_id, docs.file_id)
        self.assertEqual(
            sorted(f.name for f in listing.files), ["Nested", "in-docs.txt"]
        )
        self.assertIn(docs.file_id, nested.parents)

    def test_list_passes_order_and_view_queries(self) -> None:
        root = self.service.initialize_user(U1).folder_id

        self.service.list_files(U1, sort_field="size", sort_order="desc")
        self.assertEqual(
            self.drive.list_calls[-1],
            (f"'{root}' in parents and trashed = false", "quotaBytesUsed desc"),
        )

        self.service.list_files(U1, view="recent", sort_field="name")
        self.assertEqual(self.drive.list_calls[-1][1], "createdTime desc")

        # Non-navigating views ignore folderId.
        listing = self.service.list_files(U1, view="shared", folder_id="elsewhere")
        self.assertEqual(listing.current_folder_id, root)
        self.assertEqual(self.drive.list_calls[-1][0], "sharedWithMe = true and trashed = false")

    def test_list_rejects_bad_input(self) -> None:
        self.service.initialize_user(U1)
        with self.assertRaises(InvalidInputError):
            self.service.list_files(U1, view="everything")
        with self.assertRaises(InvalidFolderIdError):
            self.service.list_files(U1, folder_id="x' or '1'='1")

    def test_rename(self) -> None:
        self.service.initialize_user(U1)
        file_id = self._upload(U1)[0].file_id
        renamed = self.service.rename_item(U1, file_id, " b.txt ")
        self.assertEqual(renamed.name, "b.txt")

    def test_missing_arguments(self) -> None:
        self.service.initialize_user(U1)
        with self.assertRaises(InvalidInputError) as ctx:
            self.service.delete_item(U1, None)
        self.assertEqual(ctx.exception.message, "Missing fileId")
        with self.assertRaises(InvalidInputError) as ctx:
            self.service.rename_item(U1, "F1", "")
        self.assertEqual(ctx.exception.message, "Missing fileId or newName")
        with self.assertRaises(InvalidInputError) as ctx:
            self.service.rename_item(U1, None, "x")
        self.assertEqual(ctx.exception.message, "Missing fileId or newName")
        with self.assertRaises(InvalidInputError) as ctx:
            self.service.create_folder(U1, "   ")
        self.assertEqual(ctx.exception.message, "Missing folder name")
        with self.assertRaises(InvalidInputError) as ctx:
            self.service.upload_files(U1, [])
        self.assertEqual(ctx.exception.message, "No file uploaded")

    def test_upload_multiple_files(self) -> None:
        self.service.initialize_user(U1)
        sources = [
            UploadSource("one.txt", io.BytesIO(b"1")),
            UploadSource("C:\\Users\\me\\two.txt", io.BytesIO(b"22")),
        ]
        items = self.service.upload_files(U1, sources)
        self.assertEqual([i.name for i in items], ["one.txt", "two.txt"])
        self.assertEqual([i.size for i in items], [1, 2])

    def test_temporary_files_are_removed(self) -> None:
        self.service.initialize_user(U1)
        self._upload(U1)
        self.drive.fail_uploads = True
        with self.assertRaises(UpstreamUnavailableError):
            self._upload(U1, name="b.txt")

        self.assertEqual(len(self.drive.upload_paths), 2)
        for path in self.drive.upload_paths:
            self.assertFalse(os.path.exists(path))


class TestUploadHelpers(unittest.TestCase):
    def test_clean_upload_filename(self) -> None:
        self.assertEqual(clean_upload_filename("a.txt"), "a.txt")
        self.assertEqual(clean_upload_filename("../../etc/passwd"), "passwd")
        self.assertEqual(clean_upload_filename("dir\\file.pdf"), "file.pdf")
        for bad in (None, "", "  ", "..", "dir/"):
            with self.subTest(value=bad):
                with self.assertRaises(InvalidInputError):
                    clean_upload_filename(bad)

    def test_spooled_upload_removes_file_on_error(self) -> None:
        with self.assertRaises(RuntimeError):
            with spooled_upload(io.BytesIO(b"data")) as path:
                with open(path, "rb") as f:
                    self.assertEqual(f.read(), b"data")
                raise RuntimeError("boom")
        self.assertFalse(os.path.exists(path))


if __name__ == "__main__":
    unittest.main()
