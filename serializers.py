# JSON shapes for API responses


def _iso(value):
    return value.isoformat() if value else None


def user_summary(user):
    return {
        "id": user.user_id,
        "username": user.username,
        "profilePicture": user.profile_picture
    }


def search_result(user):
    return {**user_summary(user), "bio": user.bio}


def user_to_dict(user, include_email=True):
    """Full profile with populated follower/following summaries."""
    data = {
        "id": user.user_id,
        "username": user.username,
        "profilePicture": user.profile_picture,
        "bio": user.bio,
        "followers": [user_summary(u) for u in user.followers],
        "following": [user_summary(u) for u in user.following],
        "posts": [post.post_id for post in user.posts],
        "likedPosts": [post.post_id for post in user.liked_posts],
        "createdAt": _iso(user.created_at),
        "updatedAt": _iso(user.updated_at)
    }
    if include_email:
        data["email"] = user.email
    return data


def comment_to_dict(comment, populate_likes=False):
    likes = comment.like_rows
    return {
        "id": comment.comment_id,
        "content": comment.content,
        "author": user_summary(comment.author),
        "post": comment.post_id,
        "likes": [user_summary(like.user) for like in likes] if populate_likes
                 else [like.user_id for like in likes],
        "likesCount": len(likes),
        "createdAt": _iso(comment.created_at),
        "updatedAt": _iso(comment.updated_at)
    }


def post_to_dict(post, include_comments=False):
    data = {
        "id": post.post_id,
        "content": post.content,
        "image": post.image,
        "author": user_summary(post.author),
        "likes": post.likes,
        "tags": list(post.tags or []),
        "likesCount": len(post.like_rows),
        "commentsCount": len(post.comments),
        "createdAt": _iso(post.created_at),
        "updatedAt": _iso(post.updated_at)
    }
    if include_comments:
        data["comments"] = [comment_to_dict(c) for c in post.comments]
    else:
        data["comments"] = [c.comment_id for c in post.comments]
    return data
