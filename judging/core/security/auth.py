from fastapi import Header, HTTPException, status

def get_current_judge(x_judge_id: str = Header(default=None)) -> str:
    """
    Identify the judge making the request

    Sign-in happens upstream; the gateway forwards the judge id in X-Judge-Id.
    """
    if not x_judge_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing judge identity"
        )
    return x_judge_id
