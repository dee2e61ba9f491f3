import logging
import sys
import uuid
from contextvars import ContextVar
from pythonjsonlogger import jsonlogger

request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default="-")


def get_request_id() -> str:
    return request_id_ctx_var.get()


def ensure_request_id(value: str | None) -> str:
    return value or str(uuid.uuid4())


class ContextFilter(logging.Filter):
    """Stamps every record with the request id and the deployment it came from."""

    def __init__(self, service: str, environment: str) -> None:
        super().__init__()
        self.service = service
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        record.service = self.service
        record.environment = self.environment
        return True


def configure_logging(level: str = "INFO", service: str = "book_heaven", environment: str = "dev") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s %(service)s %(environment)s"
        )
    )
    handler.addFilter(ContextFilter(service, environment))
    root.handlers = [handler]
    # engine chatter stays at WARNING or above
    logging.getLogger("sqlalchemy.engine").setLevel(max(logging.WARNING, root.level))
