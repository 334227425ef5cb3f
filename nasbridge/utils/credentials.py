"""Secure credential storage using system keyring."""

import logging

import keyring
import keyring.errors

logger = logging.getLogger(__name__)

# Keyring service name for nasbridge
SERVICE_NAME = "nasbridge"


class CredentialStore:
    """Manages secure storage of NAS passwords using system keyring."""

    def __init__(self, service_name: str = SERVICE_NAME):
        """
        Initialize credential store.

        Args:
            service_name: Name of the service in keyring (default: "nasbridge")
        """
        self.service_name = service_name

    @staticmethod
    def _nas_key(host: str, username: str) -> str:
        return f"nas:{username}@{host}"

    def set_nas_password(self, host: str, username: str, password: str) -> None:
        """
        Store a NAS password in system keyring.

        Args:
            host: NAS host the password belongs to
            username: NAS username
            password: Password to store securely

        Raises:
            keyring.errors.PasswordSetError: If password cannot be stored
        """
        try:
            keyring.set_password(self.service_name, self._nas_key(host, username), password)
            logger.info(f"Stored NAS password for {username}@{host}")
        except Exception as e:
            logger.error(f"Failed to store NAS password: {e}")
            raise

    def get_nas_password(self, host: str, username: str) -> str | None:
        """
        Retrieve a NAS password from system keyring.

        Returns:
            Password if found, None otherwise
        """
        try:
            password = keyring.get_password(self.service_name, self._nas_key(host, username))
            if password:
                logger.debug(f"Retrieved NAS password for {username}@{host}")
            else:
                logger.debug(f"No NAS password found for {username}@{host}")
            return password
        except Exception as e:
            logger.error(f"Failed to retrieve NAS password: {e}")
            return None

    def delete_nas_password(self, host: str, username: str) -> bool:
        """
        Delete a NAS password from system keyring.

        Returns:
            True if deleted, False if not found or error
        """
        try:
            keyring.delete_password(self.service_name, self._nas_key(host, username))
            logger.info(f"Deleted NAS password for {username}@{host}")
            return True
        except keyring.errors.PasswordDeleteError:
            logger.warning(f"No NAS password found to delete for {username}@{host}")
            return False
        except Exception as e:
            logger.error(f"Failed to delete NAS password: {e}")
            return False

    def has_nas_password(self, host: str, username: str) -> bool:
        return self.get_nas_password(host, username) is not None
