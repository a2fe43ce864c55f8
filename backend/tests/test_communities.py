"""Tests for communities, roles and memberships."""

from unittest.mock import patch

import pytest
from fastapi import status
from sqlalchemy.orm import Session

from models.community import ROLE_FOUNDER, ROLE_MEMBER, ROLE_MODERATOR, Community, UserCommunity
from models.content import Category, Comment, Post
from models.message import Message
from models.reactions import CommentReaction, PostReaction
from models.user import User
from services.auth import Principal
from services.community_service import CommunityService
from services.exceptions import PermissionDeniedError
from tests.conftest import add_member, bearer, make_community, make_user


def _membership(db: Session, user: User, community: Community):
    return (
        db.query(UserCommunity)
        .filter(UserCommunity.user_id == user.id, UserCommunity.community_id == community.id)
        .all()
    )


@pytest.mark.integration
class TestCreateCommunity:
    """Test POST /communities/create and /communities/check-name."""

    def test_creator_becomes_founder(self, client, test_user: User, auth_headers, db_session: Session):
        response = client.post(
            "/communities/create",
            json={"name": "Cactus Club", "description": "Spiky friends", "picture": "/uploads/c/1.png"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["message"] == "Community registered successfully"

        community = db_session.get(Community, body["id"])
        memberships = _membership(db_session, test_user, community)
        assert len(memberships) == 1
        assert memberships[0].role.name == ROLE_FOUNDER

    def test_missing_fields(self, client, auth_headers):
        response = client.post(
            "/communities/create",
            json={"name": "Cactus Club", "description": "Spiky friends"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Parameters missing: picture not present"

    def test_duplicate_name(self, client, community: Community, auth_headers):
        response = client.post(
            "/communities/create",
            json={"name": community.name, "description": "again", "picture": "/uploads/c/2.png"},
            headers=auth_headers,
        )
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_check_name(self, client, community: Community, auth_headers):
        taken = client.post("/communities/check-name", json={"name": community.name}, headers=auth_headers)
        free = client.post("/communities/check-name", json={"name": "Brand New"}, headers=auth_headers)
        own = client.post(
            "/communities/check-name",
            json={"name": community.name, "ignore_community_id": community.id},
            headers=auth_headers,
        )

        assert taken.status_code == status.HTTP_409_CONFLICT
        assert free.status_code == status.HTTP_200_OK
        assert own.status_code == status.HTTP_200_OK


@pytest.mark.integration
class TestReadCommunities:
    """Test GET /communities and GET /communities/{id}."""

    def test_list_includes_user_count(self, client, db_session, community, other_user, auth_headers):
        add_member(db_session, other_user, community, ROLE_MEMBER)
        make_community(db_session, other_user, name="Empty-ish")

        response = client.get("/communities", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        counts = {c["name"]: c["user_count"] for c in response.json()}
        assert counts == {"Gardeners": 2, "Empty-ish": 1}

    def test_get_detail(self, client, community: Community, auth_headers):
        response = client.get(f"/communities/{community.id}", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Gardeners"
        assert response.json()["user_count"] == 1

    def test_get_unknown(self, client, auth_headers):
        response = client.get("/communities/999", headers=auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Community not found (id:999)"

    def test_requires_token(self, client):
        assert client.get("/communities").status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.integration
class TestDeleteCommunity:
    """Test DELETE /communities/{id}."""

    def _populate(self, db: Session, community: Community, author: User) -> None:
        category = Category(name="General", description="Anything", community_id=community.id)
        db.add(category)
        db.flush()
        post = Post(title="Hello", content="First post", user_id=author.id, category_id=category.id)
        db.add(post)
        db.flush()
        comment = Comment(content="Nice", post_id=post.id, user_id=author.id)
        db.add(comment)
        db.flush()
        db.add_all([
            PostReaction(post_id=post.id, user_id=author.id, reaction_type="like"),
            CommentReaction(comment_id=comment.id, user_id=author.id, reaction_type="dislike"),
            Message(text="hi all", user_id=author.id, community_id=community.id),
        ])
        db.commit()

    def test_founder_delete_cascades(self, client, db_session, community, test_user, auth_headers):
        self._populate(db_session, community, test_user)
        community_id = community.id

        response = client.delete(f"/communities/{community_id}", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        db_session.expire_all()
        assert db_session.get(Community, community_id) is None
        for model in (UserCommunity, Category, Post, Comment, PostReaction, CommentReaction, Message):
            assert db_session.query(model).count() == 0, model.__name__
        assert db_session.get(User, test_user.id) is not None

    def test_member_cannot_delete(self, client, db_session, community, other_user):
        add_member(db_session, other_user, community, ROLE_MEMBER)

        response = client.delete(f"/communities/{community.id}", headers=bearer(other_user))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "You don't have the necessary permissions to do that."

    def test_moderator_cannot_delete(self, client, db_session, community, other_user):
        add_member(db_session, other_user, community, ROLE_MODERATOR)

        response = client.delete(f"/communities/{community.id}", headers=bearer(other_user))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_system_admin_can_delete(self, client, db_session, community):
        admin = make_user(db_session, "root", is_admin=True)

        response = client.delete(f"/communities/{community.id}", headers=bearer(admin))
        assert response.status_code == status.HTTP_200_OK

    def test_delete_unknown(self, client, auth_headers):
        response = client.delete("/communities/999", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.integration
class TestChangeImage:
    """Test PUT /communities/{id}/change-image."""

    def test_moderator_changes_image(self, client, db_session, community, other_user):
        add_member(db_session, other_user, community, ROLE_MODERATOR)

        response = client.put(
            f"/communities/{community.id}/change-image",
            json={"picture": "/uploads/c/new.png"},
            headers=bearer(other_user),
        )

        assert response.status_code == status.HTTP_200_OK
        db_session.refresh(community)
        assert community.picture == "/uploads/c/new.png"

    def test_member_cannot_change_image(self, client, db_session, community, other_user):
        add_member(db_session, other_user, community, ROLE_MEMBER)

        response = client.put(
            f"/communities/{community.id}/change-image",
            json={"picture": "/uploads/c/new.png"},
            headers=bearer(other_user),
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.integration
class TestGiveRole:
    """Test POST /communities/{id}/give-role-to-user."""

    def _give(self, client, community, actor, user, role_name):
        return client.post(
            f"/communities/{community.id}/give-role-to-user",
            json={"user_id": user.id, "role_name": role_name},
            headers=bearer(actor),
        )

    def test_assigning_twice_keeps_one_row(self, client, db_session, community, test_user, other_user):
        first = self._give(client, community, test_user, other_user, ROLE_MEMBER)
        second = self._give(client, community, test_user, other_user, ROLE_MODERATOR)

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_200_OK
        db_session.expire_all()
        rows = _membership(db_session, other_user, community)
        assert len(rows) == 1
        assert rows[0].role.name == ROLE_MODERATOR
        assert rows[0].status == "active"

    def test_user_can_join_as_member(self, client, db_session, community, other_user):
        response = self._give(client, community, other_user, other_user, ROLE_MEMBER)

        assert response.status_code == status.HTTP_200_OK
        assert len(_membership(db_session, other_user, community)) == 1

    def test_user_cannot_self_promote(self, client, community, other_user):
        response = self._give(client, community, other_user, other_user, ROLE_MODERATOR)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_moderator_can_add_member(self, client, db_session, community, other_user):
        add_member(db_session, other_user, community, ROLE_MODERATOR)
        newcomer = make_user(db_session, "newcomer")

        response = self._give(client, community, other_user, newcomer, ROLE_MEMBER)
        assert response.status_code == status.HTTP_200_OK

    def test_moderator_cannot_grant_moderator(self, client, db_session, community, other_user):
        add_member(db_session, other_user, community, ROLE_MODERATOR)
        newcomer = make_user(db_session, "newcomer")

        response = self._give(client, community, other_user, newcomer, ROLE_MODERATOR)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_moderator_cannot_demote_founder(self, client, db_session, community, test_user, other_user):
        add_member(db_session, other_user, community, ROLE_MODERATOR)

        response = self._give(client, community, other_user, test_user, ROLE_MEMBER)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_grant_losing_insert_race_is_reauthorized(self, db_session, community, other_user):
        """A moderator adding a member must not overwrite a staff role created concurrently."""
        add_member(db_session, other_user, community, ROLE_MODERATOR)
        newcomer = make_user(db_session, "newcomer")
        service = CommunityService(db_session)
        real_find = service.memberships.find
        calls = []

        def racing_find(user_id, community_id):
            if not calls:
                calls.append(1)
                # The founder promotes the newcomer between our lookup and our insert.
                add_member(db_session, newcomer, community, ROLE_MODERATOR)
                return None
            return real_find(user_id, community_id)

        with patch.object(service.memberships, "find", side_effect=racing_find):
            with pytest.raises(PermissionDeniedError):
                service.give_user_community_role(
                    Principal(user_id=other_user.id), community.id, newcomer.id, ROLE_MEMBER
                )

        db_session.expire_all()
        rows = _membership(db_session, newcomer, community)
        assert [row.role.name for row in rows] == [ROLE_MODERATOR]

    def test_unknown_role(self, client, community, test_user, other_user):
        response = self._give(client, community, test_user, other_user, "community_overlord")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Role not found"

    def test_unknown_user(self, client, community, test_user, auth_headers):
        response = client.post(
            f"/communities/{community.id}/give-role-to-user",
            json={"user_id": 9999, "role_name": ROLE_MEMBER},
            headers=auth_headers,
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_missing_params(self, client, community, auth_headers):
        response = client.post(
            f"/communities/{community.id}/give-role-to-user",
            json={"user_id": 1},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Parameters missing: role_name not present"


@pytest.mark.integration
class TestRolesAndMembers:
    """Test role lookups, member listing and removal."""

    def test_list_roles(self, client, auth_headers):
        response = client.get("/roles", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert [r["display_name"] for r in response.json()] == ["Founder", "Moderator", "Member"]

    def test_get_user_role(self, client, community, test_user, auth_headers):
        response = client.get(f"/communities/{community.id}/user/{test_user.id}/role", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == ROLE_FOUNDER
        assert response.json()["display_name"] == "Founder"

    def test_get_role_without_membership(self, client, community, other_user, auth_headers):
        response = client.get(f"/communities/{community.id}/user/{other_user.id}/role", headers=auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "This user has no role in that community"

    def test_members(self, client, db_session, community, other_user, auth_headers):
        add_member(db_session, other_user, community, ROLE_MEMBER)

        response = client.get(f"/communities/{community.id}/members", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        members = {m["username"]: m for m in response.json()["data"]}
        assert members["testuser"]["role"] == ROLE_FOUNDER
        assert members["otheruser"]["role_display_name"] == "Member"
        assert members["otheruser"]["status"] == "active"

    def test_member_can_leave(self, client, db_session, community, other_user):
        add_member(db_session, other_user, community, ROLE_MEMBER)

        response = client.delete(
            f"/communities/{community.id}/members/{other_user.id}",
            headers=bearer(other_user),
        )

        assert response.status_code == status.HTTP_200_OK
        assert _membership(db_session, other_user, community) == []

    def test_member_cannot_remove_others(self, client, db_session, community, test_user, other_user):
        add_member(db_session, other_user, community, ROLE_MEMBER)

        response = client.delete(
            f"/communities/{community.id}/members/{test_user.id}",
            headers=bearer(other_user),
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_moderator_removes_member(self, client, db_session, community, other_user):
        add_member(db_session, other_user, community, ROLE_MODERATOR)
        newcomer = make_user(db_session, "newcomer")
        add_member(db_session, newcomer, community, ROLE_MEMBER)

        response = client.delete(
            f"/communities/{community.id}/members/{newcomer.id}",
            headers=bearer(other_user),
        )
        assert response.status_code == status.HTTP_200_OK

    def test_remove_unknown_membership(self, client, community, other_user, auth_headers):
        response = client.delete(f"/communities/{community.id}/members/{other_user.id}", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND
