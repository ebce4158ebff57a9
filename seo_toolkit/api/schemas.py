"""
API request models
Pydantic models validating the JSON bodies of the API endpoints
"""

from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from flask import request
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from seo_toolkit.exceptions import InvalidPayloadError

T = TypeVar('T', bound=BaseModel)


class AnalyzeRequest(BaseModel):
    url: str = Field(min_length=1)
    html: Optional[str] = None


class BatchAnalyzeRequest(BaseModel):
    urls: List[str] = []
    domain: Optional[str] = None

    @model_validator(mode='after')
    def require_target(self):
        if not self.urls and not self.domain:
            raise ValueError('Either urls or domain is required')
        return self


class GenerateReportRequest(BaseModel):
    url: str = Field(min_length=1)
    email: Optional[str] = None
    format: str = 'json'


class ContentMeta(BaseModel):
    model_config = ConfigDict(extra='allow')

    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None


class ComprehensiveRequest(BaseModel):
    content: str = Field(min_length=1)
    keywords: List[str] = []
    meta: ContentMeta = Field(default_factory=ContentMeta)
    images: List[Dict[str, Any]] = []
    url: Optional[str] = None


class CheckKeywordsRequest(BaseModel):
    keywords: List[str] = []


class KeywordAnalysisRequest(BaseModel):
    content: str
    keywords: List[str] = []


class MetaRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = []
    industry: Optional[str] = None


class SocialMediaRequest(BaseModel):
    model_config = ConfigDict(extra='allow')

    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None
    html: Optional[str] = None

    @model_validator(mode='after')
    def require_content(self):
        if not self.title and not self.html:
            raise ValueError('Either title or html is required')
        return self


class ImagesRequest(BaseModel):
    images: List[Dict[str, Any]] = Field(min_length=1)


class StructuredDataRequest(BaseModel):
    type: str = Field(min_length=1)
    data: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = None


class ValidateStructuredDataRequest(BaseModel):
    data: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = None
    html: Optional[str] = None
    url: str = ''

    @model_validator(mode='after')
    def require_source(self):
        if self.data is None and not self.html:
            raise ValueError('Either data or html is required')
        return self


class SitemapImage(BaseModel):
    model_config = ConfigDict(extra='allow')

    url: str = Field(min_length=1)
    caption: Optional[str] = None
    title: Optional[str] = None


class SitemapUrl(BaseModel):
    """One sitemap entry; unknown keys are kept for the XML builder"""
    model_config = ConfigDict(extra='allow')

    url: str = Field(min_length=1)
    lastmod: Optional[str] = None
    changefreq: Optional[str] = None
    priority: Optional[float] = None
    images: List[SitemapImage] = []
    videos: List[Dict[str, Any]] = []


class SitemapRequest(BaseModel):
    urls: List[Union[str, SitemapUrl]] = []
    domain: Optional[str] = None
    include_images: bool = False
    include_videos: bool = False

    @model_validator(mode='after')
    def require_target(self):
        if not self.urls and not self.domain:
            raise ValueError('Either urls or domain is required')
        return self


class RobotsRequest(BaseModel):
    domain: str = Field(min_length=1)
    profile: str = 'standard'
    sitemap_urls: List[str] = []
    custom_rules: List[Dict[str, Any]] = []


class ValidateRobotsRequest(BaseModel):
    content: Optional[str] = None
    url: Optional[str] = None

    @model_validator(mode='after')
    def require_source(self):
        if self.content is None and not self.url:
            raise ValueError('Either content or url is required')
        return self


def _describe(error: ValidationError) -> str:
    messages = []
    for item in error.errors():
        location = '.'.join(str(part) for part in item.get('loc', ()))
        message = item.get('msg', 'invalid value')
        messages.append(f"{location}: {message}" if location else message)
    return '; '.join(messages)


def parse_request(model: Type[T], allow_empty: bool = False) -> T:
    """
    Validate the current request's JSON body against ``model``.

    Raises:
        InvalidPayloadError: when the body is missing or does not match
    """
    data = request.get_json(silent=True)
    if data is None and allow_empty:
        data = {}
    if data is None:
        raise InvalidPayloadError('No JSON data provided')
    if not isinstance(data, dict):
        raise InvalidPayloadError('JSON body must be an object')
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidPayloadError(_describe(e)) from e
