from pydantic import BaseModel


class AuthUser(BaseModel):
    id: str
    roles: list[str] = []

    def has_any_role(self, roles: list[str]) -> bool:
        return any(role in self.roles for role in roles)
