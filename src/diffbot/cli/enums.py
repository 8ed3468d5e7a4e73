from enum import StrEnum


class Kind(StrEnum):
    article = "article"
    frontpage = "frontpage"
    image = "image"
    product = "product"
    classifier = "classifier"
