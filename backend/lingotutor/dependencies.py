from fastapi import Header, HTTPException


async def get_user_id(x_user_id: str = Header(...)) -> str:
    """Caller identity. Accounts live outside this service; the header is trusted."""
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is empty")
    return user_id
