"""Fast food store data access on top of Appwrite."""

import logging
from typing import Optional

from .appwrite_client import AppwriteClient, AppwriteException, Query
from .models import Category, Customization, MenuItem, User

logger = logging.getLogger(__name__)


class FastFoodClient:
    """Client for the store's accounts, menu and categories."""

    def __init__(self, appwrite: AppwriteClient) -> None:
        self.appwrite = appwrite
        self.settings = appwrite.settings

    async def create_user(self, email: str, password: str, name: str) -> User:
        """
        Create an account and its user profile document.

        Raises:
            AppwriteException: If the account or profile cannot be created
        """
        logger.info("Creating account")
        new_account = await self.appwrite.create_account(email, password, name)
        if not new_account.get("$id"):
            raise AppwriteException("Account creation returned no account")

        avatar_url = self.appwrite.avatar_initials_url(name)
        document = await self.appwrite.create_document(
            self.settings.user_collection_id,
            {"email": email, "name": name, "accountID": new_account["$id"], "avatar": avatar_url},
        )
        return User.model_validate(document)

    async def sign_in(self, email: str, password: str) -> Optional[dict]:
        """
        Open an email/password session.

        Returns None without creating a session if one is already active.
        """
        try:
            await self.appwrite.get_account()
            logger.info("Session already active, skipping sign in")
            return None
        except AppwriteException:
            pass

        return await self.appwrite.create_email_session(email, password)

    async def sign_out(self) -> None:
        await self.appwrite.delete_current_session()

    async def get_current_user(self) -> Optional[User]:
        """Return the signed-in user's profile, or None on any failure."""
        try:
            current_account = await self.appwrite.get_account()
            if not current_account:
                return None

            documents = await self.appwrite.list_documents(
                self.settings.user_collection_id,
                [Query.equal("accountID", current_account["$id"])],
            )
            if not documents:
                return None

            return User.model_validate(documents[0])
        except Exception as e:
            logger.debug(f"get_current_user error: {e}")
            return None

    async def get_menu(
        self, category: Optional[str] = None, query: Optional[str] = None
    ) -> list[MenuItem]:
        """
        List menu items, optionally filtered.

        Args:
            category: Category name, "all" or empty for every category
            query: Case-insensitive text matched against name and description
        """
        documents = await self.appwrite.list_documents(self.settings.menu_collection_id)
        menu = [MenuItem.model_validate(doc) for doc in documents]

        if category and category != "all":
            categories = await self.appwrite.list_documents(
                self.settings.categories_collection_id, [Query.equal("name", category)]
            )
            if categories:
                category_id = categories[0]["$id"]
                menu = [item for item in menu if item.category_id == category_id]

        if query:
            needle = query.lower()
            menu = [
                item
                for item in menu
                if needle in item.name.lower() or needle in item.description.lower()
            ]

        return menu

    async def get_categories(self) -> list[Category]:
        documents = await self.appwrite.list_documents(self.settings.categories_collection_id)
        return [Category.model_validate(doc) for doc in documents]

    async def get_menu_item(self, menu_id: str) -> MenuItem:
        document = await self.appwrite.get_document(self.settings.menu_collection_id, menu_id)
        return MenuItem.model_validate(document)

    async def get_menu_customizations(self, menu_id: str) -> list[Customization]:
        """Customizations offered for a menu item, via the menu/customization join collection."""
        links = await self.appwrite.list_documents(
            self.settings.menu_customizations_collection_id, [Query.equal("menu", menu_id)]
        )

        customizations = []
        for link in links:
            target = link.get("customizations")
            if isinstance(target, dict):
                customizations.append(Customization.model_validate(target))
            elif target:
                document = await self.appwrite.get_document(
                    self.settings.customizations_collection_id, target
                )
                customizations.append(Customization.model_validate(document))
        return customizations
