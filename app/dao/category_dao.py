from app.dao.base_dao import BaseDAO
from app.models.category import Category


class CategoryDAO(BaseDAO[Category]):
    def __init__(self):
        super().__init__(Category)


category_dao = CategoryDAO()
