from models.message import Message
from repositories.base import Repository


class MessageRepository(Repository[Message]):
    model = Message

    def history(self, community_id: int) -> list[Message]:
        return (
            self.query()
            .filter(Message.community_id == community_id)
            .order_by(Message.created_at, Message.id)
            .all()
        )
