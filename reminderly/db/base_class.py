import re

from sqlalchemy.orm import DeclarativeBase, declared_attr

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class Base(DeclarativeBase):
    @declared_attr.directive
    def __tablename__(cls) -> str:  # type: ignore
        # EmployeeReminder -> employee_reminders
        return _CAMEL_BOUNDARY.sub("_", cls.__name__).lower() + "s"
