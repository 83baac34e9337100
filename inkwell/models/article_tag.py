"""ArticleTag model for articles_tags junction table"""

from sqlalchemy import Column, ForeignKey

from inkwell.config.database import Base, Identifier


class ArticleTag(Base):
    """
    Junction row linking one article to one tag

    Carries nothing beyond the two foreign keys; rows disappear with
    either side of the pair.
    """
    __tablename__ = "articles_tags"

    article_id = Column(Identifier, ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Identifier, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True)

    def __repr__(self):
        return f"<ArticleTag article_id={self.article_id} tag_id={self.tag_id}>"
