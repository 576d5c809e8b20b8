"""PKCS#8 re-encoding of RSA and ECDSA private keys.

The cloud key-pair registry fingerprints a key as SHA-1 over this container,
so the layout has to be byte-exact:

    PrivateKeyInfo ::= SEQUENCE {
        version              INTEGER (0),
        privateKeyAlgorithm  AlgorithmIdentifier { algorithm OID, parameters NULL },
        privateKey           OCTET STRING
    }

RSA carries PKCS#1 RSAPrivateKey octets, ECDSA the SEC1 ECPrivateKey octets
(curve parameters inside the octets, NULL in the identifier). Optional
attributes are never written. See RFC 5208.
"""
from __future__ import annotations

from dataclasses import dataclass

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from pyasn1.codec.der import encoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import namedtype, univ

from ..errors import EncodingError, UnsupportedAlgorithmError


@dataclass(frozen=True)
class AlgorithmOids:
    rsa: str = "1.2.840.113549.1.1.1"
    ecdsa: str = "1.2.840.10045.2.1"


DEFAULT_OIDS = AlgorithmOids()


class AlgorithmIdentifier(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("algorithm", univ.ObjectIdentifier()),
        namedtype.NamedType("parameters", univ.Null()),
    )


class PrivateKeyInfo(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("version", univ.Integer()),
        namedtype.NamedType("privateKeyAlgorithm", AlgorithmIdentifier()),
        namedtype.NamedType("privateKey", univ.OctetString()),
    )


def _native_octets(key, oids: AlgorithmOids) -> tuple[str, bytes]:
    """Return (algorithm OID, algorithm-native DER) for a parsed private key."""
    if isinstance(key, rsa.RSAPrivateKey):
        oid = oids.rsa
    elif isinstance(key, ec.EllipticCurvePrivateKey):
        oid = oids.ecdsa
    else:
        raise UnsupportedAlgorithmError(
            f"PKCS#8 only RSA and ECDSA private keys supported, got {type(key).__name__}"
        )
    try:
        # TraditionalOpenSSL is PKCS#1 for RSA and SEC1 ECPrivateKey for EC
        octets = key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    except (ValueError, TypeError) as e:
        raise EncodingError(f"failed to marshal {type(key).__name__}: {e}") from e
    return oid, octets


def marshal_pkcs8_private_key(key, oids: AlgorithmOids = DEFAULT_OIDS) -> bytes:
    """Convert an RSA or ECDSA private key to PKCS#8 DER."""
    oid, octets = _native_octets(key, oids)
    try:
        algo = AlgorithmIdentifier()
        algo.setComponentByName("algorithm", univ.ObjectIdentifier(oid))
        algo.setComponentByName("parameters", univ.Null(""))

        info = PrivateKeyInfo()
        info.setComponentByName("version", 0)
        info.setComponentByName("privateKeyAlgorithm", algo)
        info.setComponentByName("privateKey", octets)
        return encoder.encode(info)
    except PyAsn1Error as e:
        raise EncodingError(f"failed to marshal to PKCS#8: {e}") from e


__all__ = ["AlgorithmOids", "DEFAULT_OIDS", "marshal_pkcs8_private_key"]
