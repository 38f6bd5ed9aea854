#!/usr/bin/env python3
# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

import unittest
from unittest.mock import patch

import boto3
from botocore.exceptions import BotoCoreError

from rack_aws.aws_session import AWSClients
from rack_aws.exceptions import UpstreamError


class TestAWSClients(unittest.TestCase):
    def test_given_credentials_when_create_clients_then_session_is_created(self):
        clients = AWSClients(
            region="us-east-1",
            access_key="ACCESS-KEY",
            secret_key="SECRET-KEY",
        )

        self.assertIsInstance(clients.session, boto3.session.Session)
        self.assertEqual(clients.session.region_name, "us-east-1")

    def test_given_session_when_iam_then_real_iam_client_is_returned(self):
        clients = AWSClients(access_key="ACCESS-KEY", secret_key="SECRET-KEY")

        self.assertEqual(clients.iam.meta.service_model.service_name, "iam")

    @patch("boto3.session.Session")
    def test_given_clients_when_service_used_twice_then_client_is_created_once(
        self, patch_session
    ):
        clients = AWSClients(region="eu-west-1")

        self.assertIs(clients.ecs, clients.ecs)

        patch_session.return_value.client.assert_called_once()

    @patch("boto3.session.Session")
    def test_given_clients_when_client_created_then_retries_are_disabled(self, patch_session):
        clients = AWSClients(region="eu-west-1", endpoint="http://localhost:4566")

        clients.acm

        args, kwargs = patch_session.return_value.client.call_args
        self.assertEqual(args, ("acm",))
        self.assertEqual(kwargs["endpoint_url"], "http://localhost:4566")
        self.assertEqual(kwargs["config"].retries, {"max_attempts": 1})

    @patch("boto3.session.Session")
    def test_given_each_service_when_accessed_then_matching_client_is_requested(
        self, patch_session
    ):
        clients = AWSClients()

        for service_name in ("ecs", "ec2", "iam", "acm"):
            with self.subTest(service_name=service_name):
                getattr(clients, service_name)
                args, _ = patch_session.return_value.client.call_args
                self.assertEqual(args, (service_name,))

    @patch("boto3.session.Session")
    def test_given_session_error_when_create_clients_then_upstream_error_is_raised(
        self, patch_session
    ):
        patch_session.side_effect = BotoCoreError()

        with self.assertRaises(UpstreamError):
            AWSClients()

    def test_given_invalid_endpoint_when_client_then_upstream_error_is_raised(self):
        clients = AWSClients(
            access_key="ACCESS-KEY",
            secret_key="SECRET-KEY",
            endpoint="invalid endpoint",
        )

        with self.assertRaises(UpstreamError):
            clients.ecs
