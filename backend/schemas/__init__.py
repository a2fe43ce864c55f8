# Schemas package

from .auth import (
    MessageResponse,
    UserPublic,
    RegisterRequest,
    LoginRequest,
    LoginResponse,
)

from .communities import (
    CommunityCreate,
    CommunitySummary,
    CommunityMember,
    RoleResponse,
)

from .content import (
    CategoryResponse,
    PostSummary,
    CommentResponse,
    ReactionRequest,
    ReactionResponse,
)

from .plants import (
    PlantCreate,
    PlantResponse,
)
