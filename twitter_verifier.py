import logging

from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

from known_networks import TWITTER_VERIFICATION_ADDRESS

logger = logging.getLogger(__name__)

TWITTER_RECORD_KEY = "social.twitter.username"


def twitter_validation_message(token_id: str, owner: str, handle: str) -> bytes:
    """Bytes signed by the verifier: keccak of each field, concatenated."""
    token_id_decimal = str(int(token_id, 16))
    parts = [token_id_decimal, owner, TWITTER_RECORD_KEY, handle]
    return b"".join(bytes(Web3.keccak(text=part)) for part in parts)


class TwitterVerifier:
    def __init__(self, signer_address: str = TWITTER_VERIFICATION_ADDRESS):
        self.signer_address = signer_address

    def verify(self, token_id: str, owner: str, handle: str, signature: str) -> bool:
        message = encode_defunct(primitive=twitter_validation_message(token_id, owner, handle))
        try:
            recovered = Account.recover_message(message, signature=signature)
        except Exception as e:
            logger.debug("Cannot recover twitter signature for %s: %s", token_id, e)
            return False
        return recovered.lower() == self.signer_address.lower()
