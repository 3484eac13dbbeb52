"""
SSM Parameter Store utility functions for secret values.

Secrets such as the app PIN are stored here as SecureString parameters,
never in the tracker table.
"""
import os
from typing import Optional

import boto3

# Singleton instance
_ssm_instance = None


def get_ssm() -> 'SSMClient':
    """
    Get or create singleton SSM client instance.

    Returns:
        SSMClient: Singleton instance of SSM client
    """
    global _ssm_instance
    if _ssm_instance is None:
        _ssm_instance = SSMClient(os.environ.get('PIN_PARAMETER_PREFIX', 'cycle_tracker'))
    return _ssm_instance


class SSMClient:
    """Client for reading and writing encrypted parameters."""

    def __init__(self, prefix: str):
        self.client = boto3.client('ssm')
        self.prefix = prefix.strip('/')

    def parameter_name(self, *parts: str) -> str:
        """Build a fully qualified parameter name under the configured prefix."""
        return '/' + '/'.join([self.prefix, *parts])

    def put_secret(self, name: str, value: str) -> None:
        """
        Store a value as an encrypted SecureString, replacing any previous value.

        Args:
            name: Fully qualified parameter name
            value: Secret value
        """
        self.client.put_parameter(
            Name=name,
            Value=value,
            Type='SecureString',
            Overwrite=True
        )

    def get_secret(self, name: str) -> Optional[str]:
        """
        Read and decrypt a parameter.

        Args:
            name: Fully qualified parameter name

        Returns:
            Decrypted value, or None if the parameter does not exist
        """
        try:
            response = self.client.get_parameter(Name=name, WithDecryption=True)
        except self.client.exceptions.ParameterNotFound:
            return None
        return response['Parameter']['Value']

    def delete_secret(self, name: str) -> None:
        """
        Delete a parameter. Deleting a missing parameter is not an error.

        Args:
            name: Fully qualified parameter name
        """
        try:
            self.client.delete_parameter(Name=name)
        except self.client.exceptions.ParameterNotFound:
            pass
