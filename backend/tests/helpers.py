from book_heaven.models import User


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple] = []

    def new_offer(self, seller_id, buyer_name, post_title, offered_price) -> None:
        self.sent.append(("new_offer", seller_id, buyer_name, post_title, offered_price))

    def offer_status_changed(self, user_id, post_title, status, counter_price=None) -> None:
        self.sent.append(("status", user_id, post_title, status, counter_price))


class FailingNotifier:
    def new_offer(self, *args) -> None:
        raise RuntimeError("redis unavailable")

    def offer_status_changed(self, *args) -> None:
        raise RuntimeError("redis unavailable")


def auth(user: User) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}
