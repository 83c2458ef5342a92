"""Tests for the application API resource managers."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from pterolink.application.allocations import NodeAllocationManager
from pterolink.application.databases import ApplicationDatabaseManager
from pterolink.application.nests import NestManager
from pterolink.application.servers import (
    DEFAULT_FEATURE_LIMITS,
    DEFAULT_LIMITS,
    ApplicationServerManager,
)
from pterolink.config import OptionSpec
from pterolink.errors import ValidationError
from pterolink.transport.http import RequestManager

from .test_managers import page


@pytest.fixture
def requests() -> MagicMock:
    requests = MagicMock(spec=RequestManager)
    requests.domain = "https://panel.example.com"
    requests.get = AsyncMock()
    requests.post = AsyncMock()
    requests.patch = AsyncMock()
    requests.delete = AsyncMock(return_value=None)
    return requests


def server(id: int, **extra) -> dict:  # noqa: A002
    return {
        "object": "server",
        "attributes": {
            "id": id,
            "external_id": None,
            "uuid": f"uuid-{id}",
            "identifier": f"ident{id}",
            "name": f"server {id}",
            "description": "",
            "suspended": False,
            "limits": {
                "memory": 1024,
                "swap": 0,
                "disk": 2048,
                "io": 500,
                "cpu": 100,
                "threads": None,
                "oom_disabled": True,
            },
            "feature_limits": {"databases": 1, "allocations": 2, "backups": 3},
            "user": 7,
            "node": 1,
            "allocation": 11,
            "nest": 1,
            "egg": 5,
            "container": {
                "startup_command": "java -jar {{SERVER_JARFILE}}",
                "image": "ghcr.io/java:17",
                "installed": 1,
                "environment": {"SERVER_JARFILE": "server.jar", "P_SERVER_LOCATION": "eu"},
            },
            "created_at": "2023-01-02T03:04:05+00:00",
            "updated_at": "2023-01-02T03:04:05+00:00",
            **extra,
        },
    }


def allocation(id: int, assigned: bool) -> dict:  # noqa: A002
    return {
        "object": "allocation",
        "attributes": {
            "id": id,
            "ip": "10.0.0.1",
            "alias": None,
            "port": 25560 + id,
            "notes": None,
            "assigned": assigned,
        },
    }


class TestServers:
    """Tests for ApplicationServerManager."""

    def test_environment_keys_are_kept(self, requests):
        manager = ApplicationServerManager(requests)
        item = manager._patch(server(1))

        assert item["container"]["startupCommand"] == "java -jar {{SERVER_JARFILE}}"
        assert item["container"]["environment"] == {
            "SERVER_JARFILE": "server.jar",
            "P_SERVER_LOCATION": "eu",
        }
        assert item["featureLimits"] == {"databases": 1, "allocations": 2, "backups": 3}
        assert item["createdAt"].year == 2023

    def test_urls(self, requests):
        manager = ApplicationServerManager(requests)
        assert manager.admin_url_for(4) == "https://panel.example.com/admin/servers/view/4"
        assert manager.panel_url_for("ident4") == "https://panel.example.com/server/ident4"

    @pytest.mark.asyncio
    async def test_query_identifier_alias(self, requests):
        requests.get.return_value = page([server(1)], 1, 1)
        manager = ApplicationServerManager(requests)

        res = await manager.query("ident1", filter="identifier", sort="-id")

        assert list(res) == [1]
        assert requests.get.await_args.kwargs["params"] == {
            "filter[uuidShort]": "ident1",
            "sort": "-id",
        }

    @pytest.mark.asyncio
    async def test_create_fills_default_limits(self, requests):
        requests.post.return_value = server(9, name="lobby")
        manager = ApplicationServerManager(requests)

        res = await manager.create(
            user=7,
            name="lobby",
            egg=5,
            image="ghcr.io/java:17",
            startup="java -jar {{SERVER_JARFILE}}",
            environment={"SERVER_JARFILE": "server.jar"},
            allocation=11,
            limits={"memory": 2048},
        )

        path, payload = requests.post.await_args.args
        assert path == "/servers"
        assert payload["docker_image"] == "ghcr.io/java:17"
        assert payload["environment"] == {"SERVER_JARFILE": "server.jar"}
        assert payload["allocation"] == {"default": 11}
        assert payload["limits"] == {**DEFAULT_LIMITS, "memory": 2048}
        assert payload["feature_limits"] == DEFAULT_FEATURE_LIMITS
        assert "description" not in payload
        assert res["name"] == "lobby"
        assert manager.cache[9] is res

    @pytest.mark.asyncio
    async def test_create_requires_name(self, requests):
        with pytest.raises(ValidationError, match="'name'"):
            await ApplicationServerManager(requests).create(
                user=7, name="", egg=5, image="i", startup="s", environment={}, allocation=1
            )
        requests.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_details_merges_current(self, requests):
        manager = ApplicationServerManager(requests)
        manager._patch(server(1, external_id="ext-1"))
        requests.patch.return_value = server(1, name="renamed")

        await manager.update_details(1, name="renamed")

        path, payload = requests.patch.await_args.args
        assert path == "/servers/1/details"
        assert payload == {
            "name": "renamed",
            "user": 7,
            "external_id": "ext-1",
            "description": "",
        }
        requests.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_details_requires_options(self, requests):
        with pytest.raises(ValidationError):
            await ApplicationServerManager(requests).update_details(1)

    @pytest.mark.asyncio
    async def test_update_build_merges_limits(self, requests):
        manager = ApplicationServerManager(requests)
        manager._patch(server(1))
        requests.patch.return_value = server(1)

        await manager.update_build(1, memory=4096, feature_limits={"backups": 10})

        path, payload = requests.patch.await_args.args
        assert path == "/servers/1/build"
        assert payload["allocation"] == 11
        assert payload["memory"] == 4096
        assert payload["disk"] == 2048
        assert payload["oom_disabled"] is True
        assert payload["feature_limits"] == {"databases": 1, "allocations": 2, "backups": 10}

    @pytest.mark.asyncio
    async def test_update_startup_merges_environment(self, requests):
        manager = ApplicationServerManager(requests)
        manager._patch(server(1))
        requests.patch.return_value = server(1)

        await manager.update_startup(1, environment={"SERVER_JARFILE": "paper.jar"})

        path, payload = requests.patch.await_args.args
        assert path == "/servers/1/startup"
        assert payload == {
            "startup": "java -jar {{SERVER_JARFILE}}",
            "environment": {"SERVER_JARFILE": "paper.jar", "P_SERVER_LOCATION": "eu"},
            "egg": 5,
            "image": "ghcr.io/java:17",
            "skip_scripts": False,
        }

    @pytest.mark.asyncio
    async def test_suspend_updates_cache(self, requests):
        manager = ApplicationServerManager(requests)
        manager._patch(server(1))

        await manager.suspend(1)
        assert manager.cache[1]["suspended"] is True
        requests.post.assert_awaited_with("/servers/1/suspend")

        await manager.unsuspend(1)
        assert manager.cache[1]["suspended"] is False

        await manager.reinstall(1)
        requests.post.assert_awaited_with("/servers/1/reinstall")

    @pytest.mark.asyncio
    async def test_force_delete(self, requests):
        manager = ApplicationServerManager(requests)
        manager._patch(server(1))

        await manager.delete(1, force=True)

        requests.delete.assert_awaited_once_with("/servers/1/force")
        assert 1 not in manager.cache


class TestAllocations:
    """Tests for NodeAllocationManager."""

    @pytest.mark.asyncio
    async def test_fetch_caches_per_node(self, requests):
        requests.get.return_value = page([allocation(1, True), allocation(2, False)], 1, 1)
        manager = NodeAllocationManager(requests)

        res = await manager.fetch(3)
        again = await manager.fetch(3)

        assert list(res) == [1, 2]
        assert again is manager.cache[3]
        assert requests.get.await_count == 1
        assert requests.get.await_args.args[0] == "/nodes/3/allocations"
        assert manager.cache[3][2]["port"] == 25562

    @pytest.mark.asyncio
    async def test_fetch_available(self, requests):
        requests.get.side_effect = [
            page([allocation(1, True), allocation(2, False)], 1, 2),
            page([allocation(3, False)], 2, 2),
        ]
        manager = NodeAllocationManager(requests)

        available = await manager.fetch_available(3)

        assert list(available) == [2, 3]
        assert requests.get.await_args_list[1].kwargs["params"] == {"page": "2"}

    @pytest.mark.asyncio
    async def test_fetch_available_single(self, requests):
        requests.get.return_value = page([allocation(1, True), allocation(2, False)], 1, 1)
        manager = NodeAllocationManager(requests)

        assert (await manager.fetch_available(3, single=True))["id"] == 2

    @pytest.mark.asyncio
    async def test_per_node_limit(self, requests):
        requests.get.return_value = page([allocation(1, False), allocation(2, False)], 1, 1)
        manager = NodeAllocationManager(requests, OptionSpec(max=1))

        res = await manager.fetch(3)

        assert len(res) == 2
        assert list(manager.cache[3]) == [1]

    @pytest.mark.asyncio
    async def test_create_and_delete(self, requests):
        manager = NodeAllocationManager(requests)
        requests.get.return_value = page([allocation(1, False)], 1, 1)
        await manager.fetch(3)

        await manager.create(3, "10.0.0.1", ["25565", "25570-25575"])
        requests.post.assert_awaited_once_with(
            "/nodes/3/allocations", {"ip": "10.0.0.1", "ports": ["25565", "25570-25575"]}
        )

        await manager.delete(3, 1)
        requests.delete.assert_awaited_once_with("/nodes/3/allocations/1")
        assert 1 not in manager.cache[3]

    def test_admin_url(self, requests):
        assert (
            NodeAllocationManager(requests).admin_url_for(3)
            == "https://panel.example.com/admin/nodes/view/3/allocation"
        )


class TestNests:
    @pytest.mark.asyncio
    async def test_fetch_nests_and_eggs(self, requests):
        manager = NestManager(requests)
        requests.get.side_effect = [
            page([{"attributes": {"id": 1, "name": "Minecraft", "created_at": None}}], 1, 1),
            {"object": "egg", "attributes": {"id": 5, "nest": 1, "docker_image": "java"}},
        ]

        nests = await manager.fetch(include=["eggs"])
        egg = await manager.eggs.fetch(1, 5)
        again = await manager.eggs.fetch(1, 5)

        assert nests[1]["name"] == "Minecraft"
        assert requests.get.await_args_list[0].kwargs["params"] == {"include": "eggs"}
        assert requests.get.await_args_list[1].args[0] == "/nests/1/eggs/5"
        assert egg["dockerImage"] == "java"
        assert again is egg
        assert manager.eggs.admin_url_for(5) == "https://panel.example.com/admin/nests/egg/5"


class TestDatabases:
    @pytest.mark.asyncio
    async def test_fetch_for_server(self, requests):
        requests.get.return_value = page([{"attributes": {"id": 2, "database": "s3_db"}}], 1, 1)
        manager = ApplicationDatabaseManager(requests, 3)

        await manager.fetch(include=["host"])

        assert requests.get.await_args.args[0] == "/servers/3/databases"
        assert requests.get.await_args.kwargs["params"] == {"include": "host"}
        assert (await manager.fetch(2))["database"] == "s3_db"
        assert requests.get.await_count == 1

        await manager.delete(2)
        requests.delete.assert_awaited_once_with("/servers/3/databases/2")
