"""Client API paths, relative to ``/api/client``."""

from __future__ import annotations

SERVERS = ""


def server(s: str) -> str:
    return f"/servers/{s}"


def websocket(s: str) -> str:
    return f"/servers/{s}/websocket"


def resources(s: str) -> str:
    return f"/servers/{s}/resources"


def command(s: str) -> str:
    return f"/servers/{s}/command"


def power(s: str) -> str:
    return f"/servers/{s}/power"


def backups(s: str) -> str:
    return f"/servers/{s}/backups"


def backup(s: str, uuid: str) -> str:
    return f"/servers/{s}/backups/{uuid}"


def backup_lock(s: str, uuid: str) -> str:
    return f"/servers/{s}/backups/{uuid}/lock"


def backup_download(s: str, uuid: str) -> str:
    return f"/servers/{s}/backups/{uuid}/download"


def backup_restore(s: str, uuid: str) -> str:
    return f"/servers/{s}/backups/{uuid}/restore"


def allocations(s: str) -> str:
    return f"/servers/{s}/network/allocations"


def allocation(s: str, id: int) -> str:  # noqa: A002
    return f"/servers/{s}/network/allocations/{id}"


def allocation_primary(s: str, id: int) -> str:  # noqa: A002
    return f"/servers/{s}/network/allocations/{id}/primary"


def databases(s: str) -> str:
    return f"/servers/{s}/databases"


def database(s: str, id: str) -> str:  # noqa: A002
    return f"/servers/{s}/databases/{id}"


def database_rotate(s: str, id: str) -> str:  # noqa: A002
    return f"/servers/{s}/databases/{id}/rotate-password"


def schedules(s: str) -> str:
    return f"/servers/{s}/schedules"


def schedule(s: str, id: int) -> str:  # noqa: A002
    return f"/servers/{s}/schedules/{id}"


def subusers(s: str) -> str:
    return f"/servers/{s}/users"


def subuser(s: str, uuid: str) -> str:
    return f"/servers/{s}/users/{uuid}"


def files(s: str) -> str:
    return f"/servers/{s}/files/list"


def file_contents(s: str) -> str:
    return f"/servers/{s}/files/contents"


def file_download(s: str) -> str:
    return f"/servers/{s}/files/download"


def file_upload(s: str) -> str:
    return f"/servers/{s}/files/upload"


def file_write(s: str) -> str:
    return f"/servers/{s}/files/write"


def file_rename(s: str) -> str:
    return f"/servers/{s}/files/rename"


def file_copy(s: str) -> str:
    return f"/servers/{s}/files/copy"


def file_compress(s: str) -> str:
    return f"/servers/{s}/files/compress"


def file_decompress(s: str) -> str:
    return f"/servers/{s}/files/decompress"


def file_delete(s: str) -> str:
    return f"/servers/{s}/files/delete"


def file_create_folder(s: str) -> str:
    return f"/servers/{s}/files/create-folder"


def file_chmod(s: str) -> str:
    return f"/servers/{s}/files/chmod"
