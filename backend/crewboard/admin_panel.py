from sqladmin import ModelView
from crewboard.db.models.user import User, UserProfile
from crewboard.db.models.post import Post
from crewboard.db.models.game import Game
from crewboard.db.models.chat_data import ChatRoom, ChatMessage

class UserAdmin(ModelView, model=User):
    column_list = [User.id, User.email, User.is_active, User.is_admin, User.created_at]
    column_searchable_list = [User.email]
    column_details_exclude_list = [User.password]
    form_excluded_columns = [User.password]
    icon = "fa-solid fa-user"

class UserProfileAdmin(ModelView, model=UserProfile):
    column_list = [UserProfile.user_id, UserProfile.display_name, UserProfile.location, UserProfile.last_activity]
    column_searchable_list = [UserProfile.display_name]
    icon = "fa-solid fa-id-card"

class PostAdmin(ModelView, model=Post):
    column_list = [Post.id, Post.game, Post.platform, Post.author_name, Post.is_active, Post.created_at]
    column_searchable_list = [Post.game, Post.description]
    column_sortable_list = [Post.created_at]
    icon = "fa-solid fa-bullhorn"

class GameAdmin(ModelView, model=Game):
    column_list = [Game.id, Game.name, Game.category, Game.is_verified, Game.submitted_by]
    column_searchable_list = [Game.name]
    column_sortable_list = [Game.name]
    icon = "fa-solid fa-gamepad"

class ChatRoomAdmin(ModelView, model=ChatRoom):
    column_list = [ChatRoom.id, ChatRoom.last_message, ChatRoom.last_message_time, ChatRoom.created_at]
    can_create = False
    icon = "fa-solid fa-comments"

class ChatMessageAdmin(ModelView, model=ChatMessage):
    column_list = [ChatMessage.id, ChatMessage.room_id, ChatMessage.sender_name, ChatMessage.text, ChatMessage.created_at]
    column_sortable_list = [ChatMessage.created_at]
    can_create = False
    can_edit = False
    icon = "fa-solid fa-message"

ADMIN_VIEWS = [UserAdmin, UserProfileAdmin, PostAdmin, GameAdmin, ChatRoomAdmin, ChatMessageAdmin]
