"""Domain operations behind the HTTP routes.

Every relationship (follow edge, post like, comment like) is a single row, so
both directions of a relation are read from the same place and each
mutation is one commit.
"""
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from errors import (
    AlreadyExistsError,
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotFollowingError,
    NotFoundError,
    SelfReferenceError,
    ValidationError,
)
from extensions import bcrypt
from forms import (
    clean_tags,
    normalize_email,
    validate_bio,
    validate_comment,
    validate_post,
    validate_register,
    validate_username,
)
from models import db, User, Post, Comment, PostLike, CommentLike, Follower

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10


def get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError('User not found')
    return user


def get_post_or_404(post_id):
    post = db.session.get(Post, post_id)
    if not post:
        raise NotFoundError('Post not found')
    return post


def get_comment_or_404(comment_id):
    comment = db.session.get(Comment, comment_id)
    if not comment:
        raise NotFoundError('Comment not found')
    return comment


class AccountService:
    """Registration, credential checks and profile edits."""

    def register(self, username, email, password):
        validate_register({"username": username, "email": email, "password": password})
        email = normalize_email(email)

        existing_user = User.query.filter(
            or_(User.email == email, User.username == username)
        ).first()
        if existing_user:
            raise ConflictError('User with this email or username already exists')

        user = User(
            username=username,
            email=email,
            password_hash=bcrypt.generate_password_hash(password).decode('utf-8')
        )
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError('User with this email or username already exists')
        logger.info("Registered user %s", user.user_id)
        return user

    def authenticate(self, email, password):
        user = User.query.filter_by(email=normalize_email(email)).first()
        if not user or not bcrypt.check_password_hash(user.password_hash, password):
            raise AuthenticationError('Invalid credentials')
        return user

    def update_profile(self, user, username=None, bio=None, profile_picture=None):
        if username:
            message = validate_username(username)
            if message:
                raise ValidationError([{"field": "username", "message": message}], message=message)
            taken = User.query.filter(
                User.username == username,
                User.user_id != user.user_id
            ).first()
            if taken:
                raise ConflictError('Username is already taken')
            user.username = username

        if bio is not None:
            validate_bio(bio)
            user.bio = bio

        if profile_picture:
            user.profile_picture = profile_picture

        db.session.commit()
        return user


class FollowService:
    def __init__(self, actor):
        self.actor = actor

    def _edge(self, target):
        return Follower.query.filter_by(
            follower_user_id=self.actor.user_id,
            followed_user_id=target.user_id
        ).first()

    def follow(self, target_id):
        if target_id == self.actor.user_id:
            raise SelfReferenceError('You cannot follow yourself')

        target = get_user_or_404(target_id)
        if self._edge(target):
            raise AlreadyExistsError('You are already following this user')

        db.session.add(Follower(follower=self.actor, followed=target))
        try:
            db.session.commit()
        except IntegrityError:
            # a concurrent request created the same edge
            db.session.rollback()
            raise AlreadyExistsError('You are already following this user')
        logger.info("User %s followed %s", self.actor.user_id, target.user_id)
        return target

    def unfollow(self, target_id):
        target = get_user_or_404(target_id)
        edge = self._edge(target)
        if not edge:
            raise NotFollowingError('You are not following this user')

        db.session.delete(edge)
        db.session.commit()
        logger.info("User %s unfollowed %s", self.actor.user_id, target.user_id)
        return target

    def suggestions(self, limit=5):
        followed_ids = db.session.query(Follower.followed_user_id)\
            .filter(Follower.follower_user_id == self.actor.user_id)
        return User.query.filter(
            User.user_id != self.actor.user_id,
            User.user_id.notin_(followed_ids)
        ).order_by(User.created_at.desc(), User.user_id.desc()).limit(limit).all()


class LikeService:
    """Flip the actor's like on a post or comment."""

    def __init__(self, actor):
        self.actor = actor

    def _toggle(self, existing, make_like):
        if existing:
            db.session.delete(existing)
            db.session.commit()
            return False

        db.session.add(make_like())
        try:
            db.session.commit()
        except IntegrityError:
            # already liked by a concurrent request
            db.session.rollback()
        return True

    def toggle_post_like(self, post_id):
        post = get_post_or_404(post_id)
        existing = PostLike.query.filter_by(
            post_id=post.post_id,
            user_id=self.actor.user_id
        ).first()
        is_liked = self._toggle(existing, lambda: PostLike(post=post, user=self.actor))
        db.session.refresh(post)
        return post, is_liked

    def toggle_comment_like(self, comment_id):
        comment = get_comment_or_404(comment_id)
        existing = CommentLike.query.filter_by(
            comment_id=comment.comment_id,
            user_id=self.actor.user_id
        ).first()
        is_liked = self._toggle(existing, lambda: CommentLike(comment=comment, user=self.actor))
        db.session.refresh(comment)
        return comment, is_liked


class ContentService:
    """Author-guarded create/update/delete of posts and comments."""

    def __init__(self, actor):
        self.actor = actor

    def _require_author(self, record, action, kind):
        if record.user_id != self.actor.user_id:
            raise ForbiddenError(f'You are not authorized to {action} this {kind}')

    def create_post(self, content, image=None, tags=None):
        validate_post({"content": content})
        post = Post(
            author=self.actor,
            content=content,
            image=image or '',
            tags=clean_tags(tags) or []
        )
        db.session.add(post)
        db.session.commit()
        return post

    def update_post(self, post_id, content=None, image=None, tags=None):
        post = get_post_or_404(post_id)
        self._require_author(post, 'update', 'post')
        validate_post({"content": content})

        post.content = content or post.content
        post.image = image or post.image
        if tags is not None:
            post.tags = clean_tags(tags)
        db.session.commit()
        return post

    def delete_post(self, post_id):
        post = get_post_or_404(post_id)
        self._require_author(post, 'delete', 'post')

        # comments (and their likes) are deleted ahead of the post row,
        # all in the same transaction
        comment_count = len(post.comments)
        db.session.delete(post)
        db.session.commit()
        logger.info("Deleted post %s with %d comments", post_id, comment_count)

    def create_comment(self, post_id, content):
        validate_comment({"content": content})
        post = get_post_or_404(post_id)
        comment = Comment(content=content, author=self.actor, post=post)
        db.session.add(comment)
        db.session.commit()
        return comment

    def update_comment(self, comment_id, content):
        comment = get_comment_or_404(comment_id)
        self._require_author(comment, 'update', 'comment')
        validate_comment({"content": content})
        comment.content = content
        db.session.commit()
        return comment

    def delete_comment(self, comment_id):
        comment = get_comment_or_404(comment_id)
        self._require_author(comment, 'delete', 'comment')
        db.session.delete(comment)
        db.session.commit()


def search_users(query):
    if not query or len(query) < SEARCH_MIN_LENGTH:
        return []
    pattern = f'%{query}%'
    return User.query.filter(
        or_(User.username.ilike(pattern), User.email.ilike(pattern))
    ).limit(SEARCH_LIMIT).all()


def list_posts(page, limit):
    """Return one page of the feed, newest first, and the total post count."""
    pagination = db.paginate(
        db.select(Post).order_by(Post.created_at.desc(), Post.post_id.desc()),
        page=page,
        per_page=limit,
        error_out=False,
        count=True
    )
    return pagination.items, pagination.total


def posts_by_user(user_id):
    return Post.query.filter_by(user_id=user_id)\
        .order_by(Post.created_at.desc(), Post.post_id.desc()).all()


def comments_for_post(post_id):
    return Comment.query.filter_by(post_id=post_id)\
        .order_by(Comment.created_at.desc(), Comment.comment_id.desc()).all()
