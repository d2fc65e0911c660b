# provisioning_core/constants.py
"""
Pinned protocol constants.

The provisioning service does not negotiate any of these; they must match
the server implementation byte for byte.
"""

# Text <-> bytes contract for every cipher operation (sign, RSA, AES).
TEXT_ENCODING = "utf-16-le"

# Bytes of the JSON text that get base64-encoded into a request payload.
PAYLOAD_ENCODING = "utf-8"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%SZ"

# RSA PKCS#1 v1.5 digest for request signatures.
SIGNATURE_HASH = "SHA256"

# "pkcs1v15" | "oaep"
RSA_ENCRYPTION_PADDING = "pkcs1v15"

AES_BLOCK_BITS = 128
AES_KEY_SIZES = (16, 24, 32)

# --- wire field names ---
F_PAYLOAD = "Payload"
F_TIMESTAMP = "Timestamp"
F_SIGNATURE = "Signature"
F_API_KEY = "ApiKey"
F_SUCCEEDED = "Succeeded"
F_MESSAGE = "Message"
F_VALUE = "Value"
F_ENC_KEY = "EncKey"
F_SESSION_KEY = "K"
F_SESSION_IV = "V"

# --- endpoint names, appended to the configured base URL ---
ADD_USER = "AddUser"
EDIT_USER = "EditUser"
DELETE_USER = "DeleteUser"
SUSPEND_USER = "SuspendUser"
RESEND_ACTIVATION_EMAIL = "ResendActivationEmail"
PUBLIC_KEY_REGISTRATION = "PKReg"
IS_USER_EXISTS = "IsUserExist"
ADD_GROUP = "AddGroup"
DELETE_GROUP = "DeleteGroup"
ASSIGN_GROUP_MEMBER = "AssignGroupMember"
UNASSIGN_GROUP_MEMBER = "UnassignGroupMember"
POST_ROLE = "PostRole"
GET_ROLES = "GetRoles"
DELETE_ROLE = "DeleteRole"
ASSIGN_TO_ROLE = "AssignToRole"
GET_ASSIGNED_TO_ROLE = "GetAssignedToRole"
