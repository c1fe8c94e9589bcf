"""Cryptographic constants for sshbox."""

# Public key algorithm accepted in the SSH wire format
SSH_RSA_ALGORITHM = "ssh-rsa"

# Armor labels
CONTAINER_ARMOR_LABEL = "SSHBOX ENCRYPTED FILE"
PKCS1_PRIVATE_KEY_LABEL = "RSA PRIVATE KEY"
OPENSSH_PRIVATE_KEY_LABEL = "OPENSSH PRIVATE KEY"

# Number of length-prefixed fields in an ssh-rsa public key blob
SSH_RSA_FIELD_COUNT = 3
# Size of each field's big-endian length prefix
SSH_LENGTH_PREFIX_SIZE = 4

# RSA-OAEP is fixed to SHA-256 for both the hash and MGF1
OAEP_HASH_SIZE = 32

# AES-256-GCM constants
SYMMETRIC_KEY_SIZE = 32
AES_GCM_NONCE_SIZE = 12
AES_GCM_TAG_SIZE = 16
BOX_OVERHEAD = AES_GCM_NONCE_SIZE + AES_GCM_TAG_SIZE
