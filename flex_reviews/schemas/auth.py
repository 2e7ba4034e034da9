from pydantic import BaseModel


class TokenOut(BaseModel):
    access_token: str
