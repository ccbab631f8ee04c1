"""
Pytest Configuration and Fixtures
"""

import os
import sys
import pytest
import structlog

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), 'src'))

# Keep key paths from the developer's shell out of the CLI tests
os.environ.pop("SIGNATURE_PRIVATE_KEY", None)
os.environ.pop("SIGNATURE_PUBLIC_KEY", None)


def _rsa_pem_pair(key_size=2048):
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


@pytest.fixture(scope="session")
def rsa_key_pair():
    """2048-bit RSA key pair as (private PEM, public PEM)."""
    return _rsa_pem_pair()


@pytest.fixture(scope="session")
def other_rsa_key_pair():
    """An unrelated RSA key pair."""
    return _rsa_pem_pair()


@pytest.fixture(scope="session")
def private_pem(rsa_key_pair):
    return rsa_key_pair[0]


@pytest.fixture(scope="session")
def public_pem(rsa_key_pair):
    return rsa_key_pair[1]


@pytest.fixture(scope="session")
def ec_private_pem():
    """SEC1 EC key; its PEM label is "EC PRIVATE KEY"."""
    key = ec.generate_private_key(ec.SECP256R1())
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def ed25519_public_pem():
    """Ed25519 key under the generic "PUBLIC KEY" label."""
    key = ed25519.Ed25519PrivateKey.generate()
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@pytest.fixture
def key_files(tmp_path, rsa_key_pair):
    """Write the RSA key pair to disk and return (private path, public path)."""
    private_path = tmp_path / "private.pem"
    public_path = tmp_path / "public.pem"
    private_path.write_bytes(rsa_key_pair[0])
    public_path.write_bytes(rsa_key_pair[1])
    return str(private_path), str(public_path)


@pytest.fixture(autouse=True)
def reset_structlog():
    """The CLI reconfigures structlog globally."""
    yield
    structlog.reset_defaults()
