"""Login, device binding and stream-request signing."""

from .credentials import Credential, CredentialResolver, generate_android_id, parse_key_values
from .session_binder import DeviceRegistration, SessionBinder, select_device
from .signing_key import derive_signing_key
from .stream_signer import SignedStreamRequest, compute_signature, is_all_access_id, make_salt, sign_stream_request

__all__ = [
    "Credential",
    "CredentialResolver",
    "DeviceRegistration",
    "SessionBinder",
    "SignedStreamRequest",
    "compute_signature",
    "derive_signing_key",
    "generate_android_id",
    "is_all_access_id",
    "make_salt",
    "parse_key_values",
    "select_device",
    "sign_stream_request",
]
