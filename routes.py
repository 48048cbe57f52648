# Routes for handling requests
import math

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token, current_user, jwt_required, verify_jwt_in_request
from flask_jwt_extended import get_current_user as jwt_user
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from errors import NotFoundError, ValidationError, server_error
from forms import validate_login
from models import User
from serializers import (
    comment_to_dict,
    post_to_dict,
    search_result,
    user_to_dict,
)
from services import (
    AccountService,
    ContentService,
    FollowService,
    LikeService,
    comments_for_post,
    get_post_or_404,
    list_posts,
    posts_by_user,
    search_users,
)
from storage import get_image_storage, validate_image_upload

# Create blueprints for different route categories
main_bp = Blueprint('main', __name__)
auth_bp = Blueprint('auth', __name__)
posts_bp = Blueprint('posts', __name__)
comments_bp = Blueprint('comments', __name__)
users_bp = Blueprint('users', __name__)
upload_bp = Blueprint('upload', __name__)


def get_json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def int_arg(name, default, minimum=1, maximum=None):
    try:
        value = int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default
    if value < minimum:
        return default
    if maximum is not None:
        value = min(value, maximum)
    return value


def optional_viewer():
    """Return the caller when a usable token is sent, otherwise None."""
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        # public routes treat a bad or expired token as no token
        return None
    return jwt_user()


@main_bp.route('/health', methods=['GET'])
def health():
    return jsonify({"success": True, "message": "OK"}), 200


# Authentication Endpoints
@auth_bp.route('/register', methods=['POST'])
@server_error('Server error during registration')
def register():
    """User Registration Endpoint"""
    data = get_json_body()
    user = AccountService().register(
        data.get('username'),
        data.get('email'),
        data.get('password')
    )
    token = create_access_token(identity=str(user.user_id))
    return jsonify({
        "success": True,
        "message": "User registered successfully",
        "token": token,
        "user": user_to_dict(user)
    }), 201


@auth_bp.route('/login', methods=['POST'])
@server_error('Server error during login')
def login():
    """User Login Endpoint"""
    data = get_json_body()
    validate_login(data)
    user = AccountService().authenticate(data['email'], data['password'])
    token = create_access_token(identity=str(user.user_id))
    return jsonify({
        "success": True,
        "message": "Login successful",
        "token": token,
        "user": user_to_dict(user)
    }), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
@server_error('Server error')
def get_current_user():
    return jsonify({"success": True, "user": user_to_dict(current_user)}), 200


@auth_bp.route('/profile', methods=['PUT'])
@jwt_required()
@server_error('Server error during profile update')
def update_profile():
    data = get_json_body()
    user = AccountService().update_profile(
        current_user,
        username=data.get('username'),
        bio=data.get('bio'),
        profile_picture=data.get('profilePicture')
    )
    return jsonify({
        "success": True,
        "message": "Profile updated successfully",
        "user": user_to_dict(user)
    }), 200


# Post Endpoints
@posts_bp.route('', methods=['GET'])
@server_error('Server error while fetching posts')
def get_all_posts():
    page = int_arg('page', 1)
    limit = int_arg('limit', current_app.config['DEFAULT_PAGE_LIMIT'],
                    maximum=current_app.config['MAX_PAGE_LIMIT'])
    posts, total = list_posts(page, limit)
    return jsonify({
        "success": True,
        "posts": [post_to_dict(post, include_comments=True) for post in posts],
        "currentPage": page,
        "totalPages": math.ceil(total / limit),
        "totalPosts": total
    }), 200


@posts_bp.route('/<int:post_id>', methods=['GET'])
@server_error('Server error while fetching post')
def get_post(post_id):
    post = get_post_or_404(post_id)
    return jsonify({"success": True, "post": post_to_dict(post, include_comments=True)}), 200


@posts_bp.route('/user/<int:user_id>', methods=['GET'])
@server_error('Server error while fetching user posts')
def get_posts_by_user(user_id):
    posts = posts_by_user(user_id)
    return jsonify({
        "success": True,
        "posts": [post_to_dict(post, include_comments=True) for post in posts]
    }), 200


@posts_bp.route('', methods=['POST'])
@jwt_required()
@server_error('Server error during post creation')
def create_post():
    data = get_json_body()
    post = ContentService(current_user).create_post(
        data.get('content'),
        image=data.get('image'),
        tags=data.get('tags')
    )
    return jsonify({
        "success": True,
        "message": "Post created successfully",
        "post": post_to_dict(post)
    }), 201


@posts_bp.route('/<int:post_id>', methods=['PUT'])
@jwt_required()
@server_error('Server error during post update')
def update_post(post_id):
    data = get_json_body()
    post = ContentService(current_user).update_post(
        post_id,
        content=data.get('content'),
        image=data.get('image'),
        tags=data.get('tags')
    )
    return jsonify({
        "success": True,
        "message": "Post updated successfully",
        "post": post_to_dict(post)
    }), 200


@posts_bp.route('/<int:post_id>', methods=['DELETE'])
@jwt_required()
@server_error('Server error during post deletion')
def delete_post(post_id):
    ContentService(current_user).delete_post(post_id)
    return jsonify({"success": True, "message": "Post deleted successfully"}), 200


@posts_bp.route('/<int:post_id>/like', methods=['POST'])
@jwt_required()
@server_error('Server error during like operation')
def toggle_post_like(post_id):
    post, is_liked = LikeService(current_user).toggle_post_like(post_id)
    return jsonify({
        "success": True,
        "message": "Post liked" if is_liked else "Post unliked",
        "post": post_to_dict(post),
        "isLiked": is_liked
    }), 200


# Comment Endpoints
@comments_bp.route('/post/<int:post_id>', methods=['GET'])
@server_error('Server error while fetching comments')
def get_comments(post_id):
    comments = comments_for_post(post_id)
    return jsonify({
        "success": True,
        "comments": [comment_to_dict(c, populate_likes=True) for c in comments]
    }), 200


@comments_bp.route('/post/<int:post_id>', methods=['POST'])
@jwt_required()
@server_error('Server error during comment creation')
def create_comment(post_id):
    data = get_json_body()
    comment = ContentService(current_user).create_comment(post_id, data.get('content'))
    return jsonify({
        "success": True,
        "message": "Comment created successfully",
        "comment": comment_to_dict(comment)
    }), 201


@comments_bp.route('/<int:comment_id>', methods=['PUT'])
@jwt_required()
@server_error('Server error during comment update')
def update_comment(comment_id):
    data = get_json_body()
    comment = ContentService(current_user).update_comment(comment_id, data.get('content'))
    return jsonify({
        "success": True,
        "message": "Comment updated successfully",
        "comment": comment_to_dict(comment)
    }), 200


@comments_bp.route('/<int:comment_id>', methods=['DELETE'])
@jwt_required()
@server_error('Server error during comment deletion')
def delete_comment(comment_id):
    ContentService(current_user).delete_comment(comment_id)
    return jsonify({"success": True, "message": "Comment deleted successfully"}), 200


@comments_bp.route('/<int:comment_id>/like', methods=['POST'])
@jwt_required()
@server_error('Server error during comment like operation')
def toggle_comment_like(comment_id):
    comment, is_liked = LikeService(current_user).toggle_comment_like(comment_id)
    return jsonify({
        "success": True,
        "message": "Comment liked" if is_liked else "Comment unliked",
        "comment": comment_to_dict(comment, populate_likes=True),
        "isLiked": is_liked
    }), 200


# User Endpoints
@users_bp.route('/search', methods=['GET'])
@server_error('Server error while searching users')
def search():
    users = search_users(request.args.get('query', ''))
    return jsonify({"success": True, "users": [search_result(u) for u in users]}), 200


@users_bp.route('/profile/<username>', methods=['GET'])
@server_error('Server error while fetching user profile')
def get_user_profile(username):
    user = User.query.filter_by(username=username).first()
    if not user:
        raise NotFoundError('User not found')

    profile = user_to_dict(user, include_email=False)
    profile["posts"] = [post_to_dict(post) for post in posts_by_user(user.user_id)]
    viewer = optional_viewer()
    is_following = viewer.is_following(user) if viewer else False
    return jsonify({"success": True, "user": profile, "isFollowing": is_following}), 200


@users_bp.route('/<int:user_id>/follow', methods=['POST'])
@jwt_required()
@server_error('Server error during follow operation')
def follow_user(user_id):
    target = FollowService(current_user).follow(user_id)
    return jsonify({
        "success": True,
        "message": "User followed successfully",
        "user": user_to_dict(target, include_email=False),
        "isFollowing": True
    }), 200


@users_bp.route('/<int:user_id>/follow', methods=['DELETE'])
@jwt_required()
@server_error('Server error during unfollow operation')
def unfollow_user(user_id):
    target = FollowService(current_user).unfollow(user_id)
    return jsonify({
        "success": True,
        "message": "User unfollowed successfully",
        "user": user_to_dict(target, include_email=False),
        "isFollowing": False
    }), 200


@users_bp.route('/suggestions', methods=['GET'])
@jwt_required()
@server_error('Server error while fetching follow suggestions')
def get_follow_suggestions():
    limit = int_arg('limit', 5, maximum=current_app.config['MAX_PAGE_LIMIT'])
    users = FollowService(current_user).suggestions(limit)
    return jsonify({"success": True, "suggestions": [search_result(u) for u in users]}), 200


# Upload Endpoints
@upload_bp.route('/image', methods=['POST'])
@jwt_required()
@server_error('Server error during image upload')
def upload_image():
    image = request.files.get('image')
    validate_image_upload(image)
    image_url, public_id = get_image_storage().upload(image)
    return jsonify({
        "success": True,
        "message": "Image uploaded successfully",
        "imageUrl": image_url,
        "publicId": public_id
    }), 200


@upload_bp.route('/image', methods=['DELETE'])
@jwt_required()
@server_error('Server error during image deletion')
def delete_image():
    public_id = get_json_body().get('publicId')
    if not public_id:
        raise ValidationError(message='Public ID is required')

    if not get_image_storage().delete(public_id):
        raise NotFoundError('Image not found')
    return jsonify({"success": True, "message": "Image deleted successfully"}), 200
