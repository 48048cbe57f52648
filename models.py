# Database models
import sqlite3
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores foreign keys unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class User(db.Model):
    __tablename__ = 'Users'
    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(30), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    bio = db.Column(db.String(200), nullable=False, default='')
    profile_picture = db.Column(db.String(500), nullable=False, default='')
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    # Deleting a user removes everything that references it
    posts = db.relationship('Post', backref='author', cascade='all, delete',
                            order_by='Post.created_at.desc(), Post.post_id.desc()')
    comments = db.relationship('Comment', backref='author', cascade='all, delete')
    post_likes = db.relationship('PostLike', backref='user', cascade='all, delete')
    comment_likes = db.relationship('CommentLike', backref='user', cascade='all, delete')
    following_edges = db.relationship('Follower', foreign_keys='Follower.follower_user_id',
                                      backref='follower', cascade='all, delete',
                                      order_by='Follower.follower_id')
    follower_edges = db.relationship('Follower', foreign_keys='Follower.followed_user_id',
                                     backref='followed', cascade='all, delete',
                                     order_by='Follower.follower_id')

    @property
    def followers(self):
        return [edge.follower for edge in self.follower_edges]

    @property
    def following(self):
        return [edge.followed for edge in self.following_edges]

    @property
    def liked_posts(self):
        return [like.post for like in self.post_likes]

    def is_following(self, other):
        return Follower.query.filter_by(
            follower_user_id=self.user_id,
            followed_user_id=other.user_id
        ).first() is not None

    def __repr__(self):
        return f'<User {self.username}>'


class Post(db.Model):
    __tablename__ = 'Posts'
    post_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('Users.user_id'), nullable=False, index=True)
    content = db.Column(db.String(1000), nullable=False)
    image = db.Column(db.String(500), nullable=False, default='')
    tags = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    comments = db.relationship('Comment', backref='post', cascade='all, delete-orphan',
                               order_by='Comment.created_at, Comment.comment_id')
    like_rows = db.relationship('PostLike', backref='post', cascade='all, delete-orphan',
                                order_by='PostLike.like_id')

    @property
    def likes(self):
        return [like.user_id for like in self.like_rows]

    def is_liked_by(self, user):
        return any(like.user_id == user.user_id for like in self.like_rows)


class Comment(db.Model):
    __tablename__ = 'Comments'
    comment_id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('Posts.post_id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('Users.user_id'), nullable=False)
    content = db.Column(db.String(500), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    like_rows = db.relationship('CommentLike', backref='comment', cascade='all, delete-orphan',
                                order_by='CommentLike.like_id')

    @property
    def likes(self):
        return [like.user_id for like in self.like_rows]


class PostLike(db.Model):
    __tablename__ = 'PostLikes'
    __table_args__ = (db.UniqueConstraint('post_id', 'user_id', name='uq_post_like'),)
    like_id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('Posts.post_id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('Users.user_id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)


class CommentLike(db.Model):
    __tablename__ = 'CommentLikes'
    __table_args__ = (db.UniqueConstraint('comment_id', 'user_id', name='uq_comment_like'),)
    like_id = db.Column(db.Integer, primary_key=True)
    comment_id = db.Column(db.Integer, db.ForeignKey('Comments.comment_id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('Users.user_id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)


class Follower(db.Model):
    """One directed follow edge; both users' follower/following lists read it."""
    __tablename__ = 'Followers'
    __table_args__ = (
        db.UniqueConstraint('follower_user_id', 'followed_user_id', name='uq_follow_edge'),
        db.CheckConstraint('follower_user_id != followed_user_id', name='ck_no_self_follow'),
    )
    follower_id = db.Column(db.Integer, primary_key=True)
    follower_user_id = db.Column(db.Integer, db.ForeignKey('Users.user_id'), nullable=False)
    followed_user_id = db.Column(db.Integer, db.ForeignKey('Users.user_id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
