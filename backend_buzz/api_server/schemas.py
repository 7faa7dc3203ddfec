"""
Request bodies for the HTTP API.

POST endpoints take an `action` discriminator; each action is its own model
and FastAPI picks the right one from the union. Field names follow the
wire format the web client already sends (mixed snake_case and camelCase).
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from fastapi import Body
from pydantic import BaseModel, ConfigDict, Field

UserGender = Literal["male", "female"]
ProfileGender = Literal["male", "female", "other"]
LookingFor = Literal["male", "female", "both"]
VerificationStatusLiteral = Literal["pending", "verified", "failed"]


class _Body(BaseModel):
    model_config = ConfigDict(extra="ignore")


# --- Auth ---


class SignupRequest(_Body):
    action: Literal["signup"]
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    gender: UserGender


class LoginRequest(_Body):
    action: Literal["login"]
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


AuthRequest = Annotated[Union[SignupRequest, LoginRequest], Body(discriminator="action")]


# --- Users ---


class CreateUserRequest(_Body):
    action: Literal["create"]
    verification_type: Literal["wallet", "face"]
    wallet_address: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    gender: Optional[UserGender] = None
    verification_status: Optional[VerificationStatusLiteral] = None


class GetByWalletRequest(_Body):
    action: Literal["getByWallet"]
    walletAddress: str


class GetByEmailRequest(_Body):
    action: Literal["getByEmail"]
    email: str


class GetByIdRequest(_Body):
    action: Literal["getById"]
    id: int


class UpdateVerificationStatusRequest(_Body):
    action: Literal["updateVerificationStatus"]
    id: int
    status: VerificationStatusLiteral


class UpdateWalletInfoRequest(_Body):
    action: Literal["updateWalletInfo"]
    id: int
    wallet_address: str
    verification_status: Optional[VerificationStatusLiteral] = None


class UpdateProfileCompletedRequest(_Body):
    action: Literal["updateProfileCompleted"]
    id: int
    completed: bool


class RetryVerificationRequest(_Body):
    action: Literal["retryVerification"]
    id: int


UsersRequest = Annotated[
    Union[
        CreateUserRequest,
        GetByWalletRequest,
        GetByEmailRequest,
        GetByIdRequest,
        UpdateVerificationStatusRequest,
        UpdateWalletInfoRequest,
        UpdateProfileCompletedRequest,
        RetryVerificationRequest,
    ],
    Body(discriminator="action"),
]


# --- Profiles ---


class ProfileFields(_Body):
    name: Optional[str] = None
    age: Optional[int] = None
    bio: Optional[str] = None
    interests: Optional[list[str]] = None
    photos: Optional[list[str]] = None
    location: Optional[str] = None
    gender: Optional[ProfileGender] = None
    looking_for: Optional[LookingFor] = None

    def attributes(self) -> dict[str, Any]:
        return self.model_dump(
            include={"name", "age", "bio", "interests", "photos", "location", "gender", "looking_for"},
            exclude_unset=True,
        )


class CreateProfileRequest(ProfileFields):
    action: Literal["create"]
    user_id: int
    name: str = Field(..., min_length=1)


class UpdateProfileRequest(ProfileFields):
    action: Literal["update"]
    userId: int


class GetProfileRequest(_Body):
    action: Literal["getByUserId"]
    userId: int


ProfilesRequest = Annotated[
    Union[CreateProfileRequest, UpdateProfileRequest, GetProfileRequest],
    Body(discriminator="action"),
]


# --- Verification ---


class CreateFaceVerificationRequest(_Body):
    action: Literal["createFaceVerification"]
    user_id: int
    face_token: Optional[str] = None
    confidence_score: Optional[float] = None
    verification_data: Any = None


class CreateWalletVerificationRequest(_Body):
    action: Literal["createWalletVerification"]
    user_id: int
    wallet_address: str
    signature: Optional[str] = None
    nonce: Optional[str] = None
    eth_balance: Optional[str] = None
    verification_data: Any = None


class FaceDetectionBody(_Body):
    gender: UserGender
    confidence: float = Field(..., ge=0, le=100)
    faceDetected: bool


class CompleteFaceVerificationRequest(_Body):
    """Without `detection`, the server's face analyzer runs on `image`."""

    action: Literal["completeFaceVerification"]
    user_id: int
    detection: Optional[FaceDetectionBody] = None
    image: Optional[str] = None
    face_token: Optional[str] = None


class CompleteWalletVerificationRequest(_Body):
    action: Literal["completeWalletVerification"]
    user_id: int
    wallet_address: str
    eth_balance: Optional[str] = None
    signature: Optional[str] = None
    nonce: Optional[str] = None


VerificationRequest = Annotated[
    Union[
        CreateFaceVerificationRequest,
        CreateWalletVerificationRequest,
        CompleteFaceVerificationRequest,
        CompleteWalletVerificationRequest,
    ],
    Body(discriminator="action"),
]


# --- Discover / conversations ---


class SwipeRequest(_Body):
    action: Literal["swipe"]
    userId: int
    targetUserId: int
    actionType: Literal["like", "pass", "super_like"]


class SendMessageRequest(_Body):
    userId: int
    content: str
    conversationId: Optional[int] = None
    matchId: Optional[int] = None
    messageType: Literal["text", "image", "sticker"] = "text"
