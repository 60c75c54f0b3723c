"""Store a new state snapshot in the blob store.

Readers rely on there being at most one live blob under the fixed name,
see :py:class:`tradedashboard.state.reader.RemoteStateReader`.
We get there by deleting the old blob before writing the new one
without a random name suffix.

.. note ::

    Delete-then-put is not atomic. Two concurrent uploads can leave
    two blobs behind for a moment.
"""
import json
import logging
from collections.abc import Mapping

from tradedashboard.state.blob import BlobStore, BlobInfo, BlobStoreError
from tradedashboard.state.errors import InvalidInput
from tradedashboard.state.reader import DEFAULT_BLOB_NAME


logger = logging.getLogger(__name__)


def upload_state(
    blob_store: BlobStore,
    state_data: object,
    blob_name: str = DEFAULT_BLOB_NAME,
) -> BlobInfo:
    """Replace the snapshot in the blob store.

    :param state_data:
        Decoded JSON state as posted by the bot

    :raise InvalidInput:
        The state is not a JSON object

    :raise BlobStoreError:
        The new blob could not be written
    """

    if not isinstance(state_data, Mapping):
        raise InvalidInput("Invalid state data")

    payload = json.dumps(state_data).encode("utf-8")

    # Deleting is best effort, the blob might not exist
    try:
        for blob in blob_store.list(blob_name)[:1]:
            blob_store.delete(blob.url)
            logger.info("Deleted old state blob %s", blob.pathname)
    except BlobStoreError as e:
        logger.info("No existing blob to delete or delete failed: %s", e)

    blob = blob_store.put(blob_name, payload)
    logger.info("State uploaded to blob %s, total %d bytes", blob.pathname, len(payload))
    return blob
