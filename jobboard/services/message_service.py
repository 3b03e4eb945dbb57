"""
Messaging Service - conversations between an employer and a job seeker.

Collections:
1. conversations - one document per employer/job seeker pair
2. messages      - message documents referencing their conversation

CONVERSATION IDENTITY:
A pair has exactly one conversation. Its id is the two participant uids
sorted and joined with "_", and `participants` is stored sorted, so both
sides compute the same id no matter who starts the chat.

ORDERING:
- Messages: timestamp ascending, insertion order on ties
- Conversations: last_message_time descending

LISTENERS:
listen_to_conversations / listen_to_messages deliver the full ordered
snapshot immediately and after every write made through this service.
Both return an `unsubscribe` callable.
"""

import logging
from typing import Callable, List, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from jobboard.core.exceptions import InvalidRequestError, NotFoundError, PermissionDeniedError
from jobboard.db.mongodb import get_collection, COLLECTIONS
from jobboard.services.documents import serialize_doc, now
from jobboard.services.realtime import get_listener_hub, noop_unsubscribe, topics_for

logger = logging.getLogger(__name__)

INITIAL_MESSAGE_TEXT = "Hello! Thanks for your interest in our position."
CONVERSATION_STARTED = "Conversation started"


def conversation_id_for(user_a: str, user_b: str) -> str:
    """Deterministic id for the conversation between two users."""
    first, second = sorted([user_a, user_b])
    return f"{first}_{second}"


def _conversations_topic(user_id: str) -> str:
    return f"conversations:{user_id}"


def _messages_topic(conversation_id: str) -> str:
    return f"messages:{conversation_id}"


class MessageService:

    def __init__(self):
        self.conversations: Collection = get_collection(COLLECTIONS["conversations"])
        self.messages: Collection = get_collection(COLLECTIONS["messages"])
        self.profiles: Collection = get_collection(COLLECTIONS["profiles"])
        self.hub = get_listener_hub()

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    def create_conversation(self, employer_id: str, job_seeker_id: str, job_id: Optional[str] = None) -> str:
        """
        Create the conversation for an employer/job seeker pair, or return
        the id of the one that already exists.
        """
        if not employer_id or not job_seeker_id:
            raise InvalidRequestError("Both participants are required")
        if employer_id == job_seeker_id:
            raise InvalidRequestError("Cannot start a conversation with yourself")

        logger.info("Creating conversation between %s and %s (job %s)", employer_id, job_seeker_id, job_id)

        existing = self.find_conversation(employer_id, job_seeker_id)
        if existing:
            logger.info("Found existing conversation: %s", existing["id"])
            return existing["id"]

        participants = sorted([employer_id, job_seeker_id])
        conversation_id = conversation_id_for(employer_id, job_seeker_id)
        timestamp = now()
        doc = {
            "_id": conversation_id,
            "participants": participants,
            "employer_id": employer_id,
            "job_seeker_id": job_seeker_id,
            "job_id": job_id,
            "created_at": timestamp,
            "updated_at": timestamp,
            "last_message": CONVERSATION_STARTED,
            "last_message_time": timestamp,
            "employer_name": self._display_name(employer_id, employer=True),
            "job_seeker_name": self._display_name(job_seeker_id, employer=False),
        }

        try:
            self.conversations.insert_one(doc)
        except DuplicateKeyError:
            # Lost a create race for the same pair
            logger.info("Conversation %s created concurrently, reusing it", conversation_id)
            return conversation_id

        logger.info("Created new conversation: %s", conversation_id)
        self._send_initial_message(conversation_id, employer_id)
        self._publish_conversations(participants)
        return conversation_id

    def find_conversation(self, user_a: str, user_b: str) -> Optional[dict]:
        """Existing conversation containing both users, if any."""
        doc = self.conversations.find_one({"participants": {"$all": [user_a, user_b]}})
        return serialize_doc(doc)

    def get_conversation(self, conversation_id: str) -> Optional[dict]:
        return serialize_doc(self.conversations.find_one({"_id": conversation_id}))

    def get_participant_conversation(self, conversation_id: str, user_id: str) -> dict:
        """Conversation by id, only if `user_id` takes part in it."""
        conversation = self.get_conversation(conversation_id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        if user_id not in conversation["participants"]:
            raise PermissionDeniedError("Not a participant of this conversation")
        return conversation

    def get_conversations(self, user_id: str) -> List[dict]:
        cursor = self.conversations.find(
            {"participants": user_id},
            sort=[("last_message_time", DESCENDING), ("_id", ASCENDING)]
        )
        return [serialize_doc(doc) for doc in cursor]

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def send_message(self, conversation_id: str, sender_id: str, text: str) -> str:
        """Append a text message and bump the conversation's last message."""
        if not conversation_id or not sender_id or not text or not text.strip():
            raise InvalidRequestError("Missing required parameters")

        conversation = self.get_participant_conversation(conversation_id, sender_id)

        logger.debug("Sending message to conversation: %s", conversation_id)
        text = text.strip()
        timestamp = now()
        result = self.messages.insert_one({
            "conversation_id": conversation_id,
            "sender_id": sender_id,
            "text": text,
            "timestamp": timestamp,
            "read": False,
            "type": "text",
        })

        self.conversations.update_one(
            {"_id": conversation_id},
            {"$set": {
                "last_message": text,
                "last_message_time": timestamp,
                "updated_at": timestamp,
            }}
        )

        logger.info("Message sent successfully to: %s", conversation_id)
        self.hub.publish(_messages_topic(conversation_id))
        self._publish_conversations(conversation["participants"])
        return str(result.inserted_id)

    def get_messages(self, conversation_id: str) -> List[dict]:
        cursor = self.messages.find(
            {"conversation_id": conversation_id},
            sort=[("timestamp", ASCENDING), ("_id", ASCENDING)]
        )
        messages = []
        for doc in cursor:
            message = serialize_doc(doc)
            message["created_at"] = message.get("timestamp")
            messages.append(message)
        return messages

    def mark_as_read(self, conversation_id: str, reader_id: str) -> int:
        """Mark the other participant's messages as read. Returns how many changed."""
        self.get_participant_conversation(conversation_id, reader_id)
        result = self.messages.update_many(
            {"conversation_id": conversation_id, "sender_id": {"$ne": reader_id}, "read": False},
            {"$set": {"read": True}}
        )
        if result.modified_count:
            self.hub.publish(_messages_topic(conversation_id))
        return result.modified_count

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def listen_to_conversations(self, user_id: str, callback: Callable[[list], None]) -> Callable[[], None]:
        """Conversations of `user_id`, most recent activity first."""
        logger.info("Setting up conversation listener for user: %s", user_id)
        return self.hub.subscribe(
            _conversations_topic(user_id),
            lambda: self.get_conversations(user_id),
            callback
        )

    def listen_to_messages(self, conversation_id: str, callback: Callable[[list], None]) -> Callable[[], None]:
        """Messages of a conversation in chronological order."""
        if not conversation_id:
            logger.error("No conversation ID provided")
            callback([])
            return noop_unsubscribe

        logger.info("Setting up message listener for: %s", conversation_id)
        return self.hub.subscribe(
            _messages_topic(conversation_id),
            lambda: self.get_messages(conversation_id),
            callback
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _send_initial_message(self, conversation_id: str, sender_id: str) -> None:
        try:
            self.messages.insert_one({
                "conversation_id": conversation_id,
                "sender_id": sender_id,
                "text": INITIAL_MESSAGE_TEXT,
                "timestamp": now(),
                "read": False,
                "type": "system",
            })
            logger.info("Initial message sent to: %s", conversation_id)
        except Exception as e:
            logger.error("Error sending initial message to %s: %s", conversation_id, e)
            return
        self.hub.publish(_messages_topic(conversation_id))

    def _publish_conversations(self, participants: List[str]) -> None:
        for topic in topics_for("conversations", participants):
            self.hub.publish(topic)

    def _display_name(self, user_id: str, employer: bool) -> str:
        profile = self.profiles.find_one({"_id": user_id}) or {}
        if employer and profile.get("company_name"):
            return profile["company_name"]
        return profile.get("full_name") or profile.get("name") or ""


def get_message_service() -> MessageService:
    return MessageService()
