"""A small user service built on hub-kit, served by the integration tests."""

from typing import Any

from hubkit import HandlerContext, HttpResponse
from hubkit.core.exceptions import ConflictError
from hubkit.schema import enum, obj, string

USER_SCHEMA = obj(
    {
        "id": string(),
        "email": string(format="email"),
        "role": enum("member", "admin"),
    }
)


class UserStore:
    """In-memory store recording every call made by handlers."""

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.calls: list[str] = []

    async def signup(self, body: dict[str, Any]) -> dict[str, Any]:
        self.calls.append("signup")
        if body["email"] in {u["email"] for u in self.users.values()}:
            raise ConflictError("Email already registered", details={"field": "email"})
        user = {"id": f"u{len(self.users) + 1}", "email": body["email"], "role": "member"}
        self.users[user["id"]] = user
        return user

    async def delete_user(self, context: HandlerContext) -> HttpResponse:
        self.calls.append("delete")
        self.users.pop(context.path_params["user_id"], None)
        return HttpResponse(status=204)

    async def upload_avatar(self, context: HandlerContext) -> HttpResponse:
        self.calls.append("upload")
        files = context.files_for("avatar")
        return HttpResponse(
            json_body={
                "caption": context.form_fields.get("caption"),
                "files": [
                    {"name": f.filename, "type": f.content_type, "size": f.size}
                    for f in files
                ],
            }
        )

    async def list_users(self, context: HandlerContext) -> HttpResponse:
        self.calls.append("list")
        users = list(self.users.values())
        limit = context.query["limit"]
        return HttpResponse(json_body={"items": users[:limit], "limit": limit})
