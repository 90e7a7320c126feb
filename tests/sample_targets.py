"""Functions and classes the test suite intercepts."""

from __future__ import annotations

from dataclasses import dataclass, field

# Side-effect log: every original implementation appends here.
CALLS: list[tuple] = []

GREETING = "hello"
MAX_ROWS = 100


def select_all(table, limit=10):
    CALLS.append(("select_all", table, limit))
    return [f"{table}:{i}" for i in range(limit)]


def add(a, b, c=0):
    return a + b + c


def multiply(a, b, c=1):
    return a * b * c


def subtract(a, b, c=0):
    return a - b - c


def write_log(message):
    CALLS.append(("write_log", message))
    return len(message)


def greet(name):
    return f"{GREETING}, {name}"


def store_user(data):
    CALLS.append(("store_user", data))
    return 42


def register(name):
    """Calls store_user indirectly; tests observe what store_user produced."""
    store_user({"name": name, "active": True})
    return "registered"


def report(tables):
    return {table: select_all(table) for table in tables}


def describe(*args, **kwargs):
    return args, kwargs


@dataclass
class Record:
    name: str
    score: int = 0
    tags: list = field(default_factory=list)


class Repository:
    table = "user"

    def __init__(self):
        self.queries = []

    def fetch(self, table, where=None):
        self.queries.append((table, where))
        return {"table": table, "where": where}

    @staticmethod
    def normalise(name):
        return name.strip().lower()

    @classmethod
    def default_table(cls, suffix=""):
        return cls.table + suffix

    def __secret(self):
        return "hidden"

    def _protected(self):
        return "protected"

    def reveal(self):
        return self.__secret()


class AuditedRepository(Repository):
    pass
