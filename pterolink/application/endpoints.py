"""Application API paths, relative to ``/api/application``."""

from __future__ import annotations

USERS = "/users"
NODES = "/nodes"
LOCATIONS = "/locations"
SERVERS = "/servers"
NESTS = "/nests"


def user(id: int) -> str:  # noqa: A002
    return f"/users/{id}"


def user_external(id: str) -> str:  # noqa: A002
    return f"/users/external/{id}"


def node(id: int) -> str:  # noqa: A002
    return f"/nodes/{id}"


def node_configuration(id: int) -> str:  # noqa: A002
    return f"/nodes/{id}/configuration"


def location(id: int) -> str:  # noqa: A002
    return f"/locations/{id}"


def server(id: int) -> str:  # noqa: A002
    return f"/servers/{id}"


def server_external(id: str) -> str:  # noqa: A002
    return f"/servers/external/{id}"


def server_details(id: int) -> str:  # noqa: A002
    return f"/servers/{id}/details"


def server_build(id: int) -> str:  # noqa: A002
    return f"/servers/{id}/build"


def server_startup(id: int) -> str:  # noqa: A002
    return f"/servers/{id}/startup"


def server_suspend(id: int) -> str:  # noqa: A002
    return f"/servers/{id}/suspend"


def server_unsuspend(id: int) -> str:  # noqa: A002
    return f"/servers/{id}/unsuspend"


def server_reinstall(id: int) -> str:  # noqa: A002
    return f"/servers/{id}/reinstall"


def node_allocations(node: int) -> str:
    return f"/nodes/{node}/allocations"


def node_allocation(node: int, id: int) -> str:  # noqa: A002
    return f"/nodes/{node}/allocations/{id}"


def server_databases(server: int) -> str:
    return f"/servers/{server}/databases"


def server_database(server: int, id: int) -> str:  # noqa: A002
    return f"/servers/{server}/databases/{id}"


def nest(id: int) -> str:  # noqa: A002
    return f"/nests/{id}"


def nest_eggs(nest: int) -> str:
    return f"/nests/{nest}/eggs"


def nest_egg(nest: int, id: int) -> str:  # noqa: A002
    return f"/nests/{nest}/eggs/{id}"
