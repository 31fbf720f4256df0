# sshkey_core/constants.py

# Reserved sentinel written by import flows before a public key is known.
PLACEHOLDER_MARKER = "PLACEHOLDER"

KEY_TYPE_ED25519 = "Ed25519"
KEY_TYPE_P256 = "P256"
KEY_TYPE_P384 = "P384"
KEY_TYPE_P521 = "P521"
KEY_TYPE_RSA = "RSA"

KEY_TYPES = (KEY_TYPE_ED25519, KEY_TYPE_P256, KEY_TYPE_P384, KEY_TYPE_P521, KEY_TYPE_RSA)

DEFAULT_DB_PATH = "db/sshkeys.db"
DEFAULT_SECRETS_DIR = "secrets"
