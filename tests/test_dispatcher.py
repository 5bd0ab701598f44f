"""
End-to-end tests for the lifecycle dispatcher with fake clients.
"""

import json
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from typeprov.clients import ScopedClients
from typeprov.config import ProviderConfig
from typeprov.confirm import ConfirmationClient
from typeprov.dispatcher import LifecycleDispatcher
from typeprov.errors import RegistrationError
from typeprov.notifications import parse_notification

PROXY = "http://proxy.internal:8080"
ACCOUNT = "123456789012"


def client_error(code, operation="DescribeType"):
    return ClientError({"Error": {"Code": code, "Message": f"{code} raised"}}, operation)


def make_config(**kw):
    base = dict(
        types_to_activate=["ClusterAutoscale"],
        bucket_name="resources-bucket",
        services_proxy=PROXY,
        execution_role_arn_template="arn:aws:iam::{ACCOUNT_ID}:role/vws/initializer/consumer",
        type_name_prefix="Vendor::Namespace",
    )
    base.update(kw)
    return ProviderConfig(**base)


def make_notification(action, **kw):
    payload = {"action": action, "version": 1, "aws_account_id": ACCOUNT, "account_guid": "acc", "project_guid": "proj"}
    payload.update(kw)
    return parse_notification(json.dumps(payload))


class Harness:
    """Dispatcher wired to a mock registry and a mock HTTP session."""

    def __init__(self, **config_kw):
        self.registry = Mock()
        self.factory = Mock(return_value=ScopedClients(registry=self.registry, compute=Mock()))
        self.session = Mock()
        self.session.request.return_value = Mock(status_code=202, text="")
        self.confirmer = ConfirmationClient(PROXY, session=self.session)
        self.dispatcher = LifecycleDispatcher(make_config(**config_kw), self.factory, self.confirmer)


class TestScenarios:
    """Action routing scenarios."""

    def test_created_registers_missing_type(self):
        h = Harness()
        h.registry.describe_type.side_effect = client_error("TypeNotFoundException")
        h.registry.register_type.return_value = {"RegistrationToken": "t"}

        h.dispatcher.dispatch(make_notification("created"))

        h.factory.assert_called_once_with(ACCOUNT, timeout=30.0)
        h.registry.register_type.assert_called_once()
        kwargs = h.registry.register_type.call_args.kwargs
        assert kwargs["TypeName"] == "Vendor::Namespace::ClusterAutoscale"
        assert kwargs["SchemaHandlerPackage"].endswith("cluster-autoscale.zip")
        assert kwargs["SchemaHandlerPackage"] == "s3://resources-bucket/cluster-autoscale.zip"
        assert kwargs["ExecutionRoleArn"] == f"arn:aws:iam::{ACCOUNT}:role/vws/initializer/consumer"

    def test_release_cleans_up_and_confirms_through_proxy(self):
        h = Harness()
        h.registry.describe_type.return_value = {"TypeName": "Vendor::Namespace::ClusterAutoscale", "DeprecatedStatus": "LIVE"}
        h.registry.list_type_versions.return_value = {"TypeVersionSummaries": [
            {"Arn": "arn:v1", "IsDefaultVersion": False},
            {"Arn": "arn:v2", "IsDefaultVersion": True},
        ]}
        notification = make_notification(
            "release",
            confirmation={"method": "POST", "url": "https://partner.admin.vwapps.cloud/confirm"},
        )

        h.dispatcher.dispatch(notification)

        calls = [c.kwargs for c in h.registry.deregister_type.call_args_list]
        assert calls == [{"Arn": "arn:v1"}, {"Type": "RESOURCE", "TypeName": "Vendor::Namespace::ClusterAutoscale"}]
        h.session.request.assert_called_once()
        args, kwargs = h.session.request.call_args
        assert args == ("POST", "https://partner.admin.vwapps.cloud/confirm")
        assert kwargs["proxies"] == {"http": PROXY, "https": PROXY}

    @pytest.mark.parametrize("action", ["enabled", "disabled", "deleted"])
    def test_noop_actions_touch_nothing(self, action):
        h = Harness()

        h.dispatcher.dispatch(make_notification(action))

        h.factory.assert_not_called()
        assert h.registry.mock_calls == []
        h.session.request.assert_not_called()

    def test_unrecognized_action_is_not_an_error(self):
        h = Harness()

        h.dispatcher.dispatch(make_notification("archived"))

        h.factory.assert_not_called()
        assert h.registry.mock_calls == []

    def test_non_release_never_confirms(self):
        h = Harness()
        h.registry.describe_type.return_value = {"TypeName": "Vendor::Namespace::ClusterAutoscale"}

        h.dispatcher.dispatch(make_notification(
            "created", confirmation={"url": "https://partner.admin.vwapps.cloud/confirm"}
        ))

        h.session.request.assert_not_called()


class TestTypeIteration:
    """Test handling of several configured types."""

    def test_each_configured_type_in_order(self):
        h = Harness(types_to_activate=["Cluster", "DatabaseUser"])
        h.registry.describe_type.side_effect = client_error("TypeNotFoundException")

        h.dispatcher.dispatch(make_notification("created"))

        names = [c.kwargs["TypeName"] for c in h.registry.register_type.call_args_list]
        assert names == ["Vendor::Namespace::Cluster", "Vendor::Namespace::DatabaseUser"]
        packages = [c.kwargs["SchemaHandlerPackage"] for c in h.registry.register_type.call_args_list]
        assert packages[1] == "s3://resources-bucket/database-user.zip"

    def test_explicit_type_identifiers(self):
        h = Harness(types_to_activate=["Cluster", "DatabaseUser"])
        h.registry.describe_type.side_effect = client_error("TypeNotFoundException")

        h.dispatcher.dispatch(make_notification("created"), ["Project"])

        assert h.registry.register_type.call_count == 1
        assert h.registry.register_type.call_args.kwargs["TypeName"] == "Vendor::Namespace::Project"

    def test_stops_at_first_error(self):
        h = Harness(types_to_activate=["Cluster", "DatabaseUser"])
        h.registry.describe_type.side_effect = client_error("TypeNotFoundException")
        h.registry.register_type.side_effect = client_error("CFNRegistryException", "RegisterType")

        with pytest.raises(RegistrationError):
            h.dispatcher.dispatch(make_notification("created"))

        assert h.registry.register_type.call_count == 1

    def test_fixed_execution_role(self):
        h = Harness(execution_role_arn="arn:aws:iam::999:role/fixed", execution_role_arn_template=None)
        h.registry.describe_type.side_effect = client_error("TypeNotFoundException")

        h.dispatcher.dispatch(make_notification("created"))

        assert h.registry.register_type.call_args.kwargs["ExecutionRoleArn"] == "arn:aws:iam::999:role/fixed"


class TestDeadline:
    """Test that outbound calls fit into the time left for the invocation."""

    def test_release_calls_bounded_by_time_remaining(self):
        h = Harness()
        h.registry.describe_type.side_effect = client_error("TypeNotFoundException")
        notification = make_notification(
            "release",
            confirmation={"method": "POST", "url": "https://partner.admin.vwapps.cloud/confirm"},
        )

        h.dispatcher.dispatch(notification, time_remaining=2.0)

        assert h.factory.call_args.kwargs["timeout"] <= 2.0
        assert h.session.request.call_args.kwargs["timeout"] <= 2.0

    def test_no_deadline_uses_configured_timeout(self):
        h = Harness(http_timeout=12.0)
        h.registry.describe_type.return_value = {"TypeName": "Vendor::Namespace::ClusterAutoscale"}

        h.dispatcher.dispatch(make_notification("created"))

        assert h.factory.call_args.kwargs["timeout"] == 12.0
