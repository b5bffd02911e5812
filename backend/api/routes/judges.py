"""
Judge roster endpoint.

Lists the judges that take part in live debates, with the voice each
one speaks with.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_voice_resolver
from modules.voice.models import Judge
from modules.voice.profiles import VoiceProfileResolver, JUDGES

router = APIRouter()


class JudgesResponse(BaseModel):
    """Response containing the judge roster."""

    judges: list[Judge]
    total: int
    default_voice_id: Optional[str] = None


@router.get("", response_model=JudgesResponse)
async def list_judges(
    resolver: VoiceProfileResolver = Depends(get_voice_resolver),
) -> JudgesResponse:
    """
    List debate judges.

    Each judge is identified by its `type`, which is the key debate
    messages carry. Speakers outside the roster use `default_voice_id`
    when one is configured and are otherwise not voiced.
    """
    return JudgesResponse(
        judges=JUDGES,
        total=len(JUDGES),
        default_voice_id=resolver.default_voice_id or None,
    )


@router.get("/{judge_type}", response_model=Judge)
async def get_judge(judge_type: str) -> Judge:
    """Get a single judge by type."""
    for judge in JUDGES:
        if judge.type == judge_type.lower():
            return judge
    raise HTTPException(status_code=404, detail="Judge not found")
