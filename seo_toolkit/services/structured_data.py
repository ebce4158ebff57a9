"""
Structured Data Service
Builds schema.org JSON-LD documents and audits the structured data of pages
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import extruct
from w3lib.html import get_base_url

# Configure logging
logger = logging.getLogger(__name__)

SCHEMA_CONTEXT = 'https://schema.org'
IN_STOCK = 'https://schema.org/InStock'
SUPPORTED_FORMATS = ['json-ld', 'microdata', 'rdfa']
# Builders that also take a bare list of entries
LIST_KINDS = {'faq', 'breadcrumb'}

REQUIRED_PROPERTIES = {
    'Organization': ['name'],
    'WebSite': ['name', 'url'],
    'WebPage': ['name', 'url'],
    'Article': ['headline', 'author', 'datePublished'],
    'Product': ['name', 'description'],
    'Service': ['name', 'provider'],
    'Person': ['name'],
    'LocalBusiness': ['name', 'address'],
    'Event': ['name', 'startDate'],
    'FAQPage': ['mainEntity'],
    'BreadcrumbList': ['itemListElement'],
    'VideoObject': ['name', 'thumbnailUrl', 'uploadDate'],
    'ImageObject': ['url'],
    'HowTo': ['name', 'step'],
    'Recipe': ['name', 'recipeIngredient', 'recipeInstructions'],
}


def _compact(value: Any) -> Any:
    """Drop None values from nested dicts so they never reach the JSON-LD output"""
    if isinstance(value, dict):
        return {k: _compact(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_compact(v) for v in value]
    return value


def _entries(value: Any, key: str) -> List[Dict[str, Any]]:
    if isinstance(value, dict):
        value = value.get(key) or []
    if not isinstance(value, list) or not all(isinstance(entry, dict) for entry in value):
        raise TypeError(f"{key} must be a list of objects")
    return value


def _publisher(data: Any) -> Optional[Dict]:
    if not data:
        return None
    if isinstance(data, str):
        return {'@type': 'Organization', 'name': data}
    return {
        '@type': 'Organization',
        'name': data.get('name'),
        'logo': {'@type': 'ImageObject', 'url': data['logo']} if data.get('logo') else None
    }


class StructuredDataGenerator:
    """Builds JSON-LD documents for common schema.org types"""

    def __init__(self):
        self.context = SCHEMA_CONTEXT
        self.builders = {
            'organization': self.generate_organization,
            'service': self.generate_service,
            'product': self.generate_product,
            'local_business': self.generate_local_business,
            'article': self.generate_article,
            'faq': self.generate_faq,
            'breadcrumb': self.generate_breadcrumb,
            'video': self.generate_video,
            'image': self.generate_image_object,
            'video_greeting_service': self.generate_video_greeting_service,
        }

    def generate(self, kind: str, data: Any = None) -> Dict[str, Any]:
        """Dispatch to the builder for ``kind``"""
        name = (kind or '').lower().replace('-', '_')
        builder = self.builders.get(name)
        if builder is None:
            raise ValueError(f"Unsupported structured data type: {kind}")
        if name == 'video_greeting_service':
            return builder()
        if data is None:
            data = {}
        if not isinstance(data, dict) and name not in LIST_KINDS:
            raise TypeError(f"Data for {kind} must be an object")
        return builder(data)

    def generate_organization(self, data: Dict) -> Dict[str, Any]:
        return _compact({
            '@context': self.context,
            '@type': 'Organization',
            'name': data.get('name'),
            'url': data.get('url'),
            'logo': data.get('logo'),
            'description': data.get('description'),
            'contactPoint': {
                '@type': 'ContactPoint',
                'telephone': data.get('phone'),
                'contactType': 'customer service',
                'email': data.get('email')
            },
            'sameAs': data.get('social_media') or []
        })

    def generate_service(self, data: Dict) -> Dict[str, Any]:
        return _compact({
            '@context': self.context,
            '@type': 'Service',
            'name': data.get('name'),
            'description': data.get('description'),
            'provider': {
                '@type': 'Organization',
                'name': data.get('provider_name'),
                'url': data.get('provider_url')
            },
            'areaServed': data.get('area_served') or 'Worldwide',
            'serviceType': data.get('service_type'),
            'offers': {
                '@type': 'Offer',
                'price': data.get('price'),
                'priceCurrency': data.get('currency') or 'USD',
                'availability': IN_STOCK
            }
        })

    def generate_product(self, data: Dict) -> Dict[str, Any]:
        rating = data.get('rating')
        return _compact({
            '@context': self.context,
            '@type': 'Product',
            'name': data.get('name'),
            'description': data.get('description'),
            'image': data.get('images') or [],
            'brand': {'@type': 'Brand', 'name': data.get('brand_name')},
            'offers': {
                '@type': 'Offer',
                'price': data.get('price'),
                'priceCurrency': data.get('currency') or 'USD',
                'availability': IN_STOCK,
                'seller': {'@type': 'Organization', 'name': data.get('seller_name')}
            },
            'aggregateRating': {
                '@type': 'AggregateRating',
                'ratingValue': rating.get('value'),
                'reviewCount': rating.get('count')
            } if rating else None
        })

    def generate_local_business(self, data: Dict) -> Dict[str, Any]:
        address = data.get('address') or {}
        coordinates = data.get('coordinates')
        return _compact({
            '@context': self.context,
            '@type': 'LocalBusiness',
            'name': data.get('name'),
            'description': data.get('description'),
            'url': data.get('url'),
            'telephone': data.get('phone'),
            'email': data.get('email'),
            'address': {
                '@type': 'PostalAddress',
                'streetAddress': address.get('street'),
                'addressLocality': address.get('city'),
                'addressRegion': address.get('state'),
                'postalCode': address.get('zip'),
                'addressCountry': address.get('country')
            },
            'geo': {
                '@type': 'GeoCoordinates',
                'latitude': coordinates.get('lat'),
                'longitude': coordinates.get('lng')
            } if coordinates else None,
            'openingHours': data.get('hours') or [],
            'priceRange': data.get('price_range')
        })

    def generate_article(self, data: Dict) -> Dict[str, Any]:
        author = data.get('author') or {}
        if isinstance(author, str):
            author = {'name': author}
        return _compact({
            '@context': self.context,
            '@type': 'Article',
            'headline': data.get('title'),
            'description': data.get('description'),
            'image': data.get('image'),
            'author': {'@type': 'Person', 'name': author.get('name'), 'url': author.get('url')},
            'publisher': _publisher(data.get('publisher')),
            'datePublished': data.get('publish_date'),
            'dateModified': data.get('modify_date') or data.get('publish_date'),
            'mainEntityOfPage': {'@type': 'WebPage', '@id': data.get('url')} if data.get('url') else None
        })

    def generate_faq(self, questions: Any) -> Dict[str, Any]:
        questions = _entries(questions, 'questions')
        return _compact({
            '@context': self.context,
            '@type': 'FAQPage',
            'mainEntity': [
                {
                    '@type': 'Question',
                    'name': q.get('question'),
                    'acceptedAnswer': {'@type': 'Answer', 'text': q.get('answer')}
                }
                for q in questions
            ]
        })

    def generate_breadcrumb(self, items: Any) -> Dict[str, Any]:
        items = _entries(items, 'items')
        return _compact({
            '@context': self.context,
            '@type': 'BreadcrumbList',
            'itemListElement': [
                {
                    '@type': 'ListItem',
                    'position': index + 1,
                    'name': item.get('name'),
                    'item': item.get('url')
                }
                for index, item in enumerate(items)
            ]
        })

    def generate_video(self, data: Dict) -> Dict[str, Any]:
        return _compact({
            '@context': self.context,
            '@type': 'VideoObject',
            'name': data.get('title'),
            'description': data.get('description'),
            'thumbnailUrl': data.get('thumbnail'),
            'uploadDate': data.get('upload_date'),
            'duration': data.get('duration'),
            'contentUrl': data.get('video_url'),
            'embedUrl': data.get('embed_url'),
            'publisher': _publisher(data.get('publisher'))
        })

    def generate_image_object(self, data: Dict) -> Dict[str, Any]:
        author = data.get('author')
        return _compact({
            '@context': self.context,
            '@type': 'ImageObject',
            'url': data.get('url'),
            'width': data.get('width'),
            'height': data.get('height'),
            'caption': data.get('caption') or None,
            'description': data.get('description') or None,
            'author': {'@type': 'Person', 'name': author} if author else None,
            'datePublished': data.get('date_published'),
            'license': data.get('license'),
            'acquireLicensePage': data.get('acquire_license_page')
        })

    def generate_video_greeting_service(self) -> Dict[str, Any]:
        """Service offer of the video greeting marketplace itself"""
        categories = ['Birthday Video Messages', 'Anniversary Greetings', 'Holiday Wishes']
        return {
            '@context': self.context,
            '@type': 'Service',
            'name': 'Custom Video Greeting Messages',
            'description': (
                'Personalized video messages and greetings created by professional performers '
                'from around the world for any occasion.'
            ),
            'provider': {
                '@type': 'Organization',
                'name': 'WishesVideo',
                'url': 'https://wishesvideo.com'
            },
            'serviceType': 'Video Production Service',
            'areaServed': 'Worldwide',
            'category': 'Entertainment',
            'offers': {
                '@type': 'Offer',
                'priceRange': '$5-$100',
                'priceCurrency': 'USD',
                'availability': IN_STOCK
            },
            'hasOfferCatalog': {
                '@type': 'OfferCatalog',
                'name': 'Video Greeting Categories',
                'itemListElement': [
                    {'@type': 'Offer', 'itemOffered': {'@type': 'Service', 'name': name}}
                    for name in categories
                ]
            }
        }


def get_schema_type(schema: Dict) -> Optional[str]:
    """Schema type across JSON-LD, microdata and RDFa shapes, reduced to its local name"""
    if not isinstance(schema, dict):
        return None
    raw = None
    for key in ('@type', 'type', 'itemType', 'itemtype', 'typeof', 'typeOf'):
        if schema.get(key):
            raw = schema[key]
            break
    if isinstance(raw, list):
        raw = next((item for item in raw if isinstance(item, str) and item.strip()), None)
    if not isinstance(raw, str) or not raw.strip():
        return None

    # RDFa may provide several space separated tokens
    value = raw.strip().split()[0]
    if value.startswith(('http://', 'https://')):
        value = value.rstrip('/').split('/')[-1]
    if ':' in value and value.split(':', 1)[0].lower() in ('schema', 'rdf', 'rdfa', 'vocab'):
        value = value.split(':', 1)[1]
    return value or None


def missing_required_properties(schema: Dict, schema_type: Optional[str] = None) -> List[str]:
    schema_type = schema_type or get_schema_type(schema)
    if not schema_type:
        return []
    properties = schema.get('properties') if isinstance(schema.get('properties'), dict) else schema
    return [prop for prop in REQUIRED_PROPERTIES.get(schema_type, []) if prop not in properties]


def validate_structured_data(data: Any) -> Dict[str, Any]:
    """Check a JSON-LD document for @context, @type, a name and the type's required properties"""
    if not isinstance(data, dict):
        return {'is_valid': False, 'errors': ['Structured data must be a JSON object']}

    errors = []
    if not data.get('@context'):
        errors.append('Missing @context')
    if not data.get('@type'):
        errors.append('Missing @type')
    if not data.get('name') and not data.get('headline'):
        errors.append('Missing name or headline')

    schema_type = get_schema_type(data)
    missing = [prop for prop in missing_required_properties(data, schema_type)
               if prop not in ('name', 'headline')]
    if missing:
        errors.append(f"Missing required properties for {schema_type}: {', '.join(missing)}")

    return {'is_valid': not errors, 'errors': errors}


def _validate_extracted(schema: Dict, format_type: str) -> Tuple[bool, List[str]]:
    errors = []
    if not schema:
        return False, ['Empty schema']
    if format_type == 'json-ld':
        if '@type' not in schema:
            errors.append('JSON-LD schema missing @type')
        if '@context' not in schema:
            errors.append('JSON-LD schema missing @context')
    elif format_type == 'microdata' and not schema.get('type'):
        errors.append('Microdata schema missing itemtype')
    schema_type = get_schema_type(schema)
    missing = missing_required_properties(schema, schema_type)
    if missing:
        errors.append(f"Missing required properties for {schema_type}: {', '.join(missing)}")
    return not errors, errors


def analyze_page_schemas(html: str, url: str) -> Dict[str, Any]:
    """
    Inventory the structured data embedded in a page.

    JSON-LD, microdata and RDFa are extracted with extruct; JSON-LD
    ``@graph`` containers are expanded into their member nodes.

    Returns:
        Dict with ``total``, ``valid``, ``invalid``, ``types``, ``details``
        and ``errors``
    """
    try:
        base_url = get_base_url(html, url)
        extracted = extruct.extract(html, base_url=base_url, syntaxes=SUPPORTED_FORMATS, uniform=True)
    except Exception as e:
        # extruct surfaces lxml and rdflib errors for badly broken markup
        logger.warning(f"Structured data extraction failed for {url}: {e}")
        extracted = {}

    details: List[Dict[str, Any]] = []
    errors: List[str] = []
    for format_type in SUPPORTED_FORMATS:
        for schema in extracted.get(format_type) or []:
            nodes = [schema]
            if format_type == 'json-ld' and isinstance(schema, dict) and isinstance(schema.get('@graph'), list):
                nodes = [child for child in schema['@graph'] if isinstance(child, dict)]
                for child in nodes:
                    child.setdefault('@context', schema.get('@context'))
            for node in nodes:
                schema_type = get_schema_type(node)
                is_valid, node_errors = _validate_extracted(node, format_type)
                errors.extend(node_errors)
                details.append({
                    'type': schema_type or 'Unknown',
                    'format': format_type,
                    'valid': is_valid,
                    'missing_required': missing_required_properties(node, schema_type),
                })

    valid = sum(1 for d in details if d['valid'])
    return {
        'url': url,
        'total': len(details),
        'valid': valid,
        'invalid': len(details) - valid,
        'types': sorted({d['type'] for d in details if d['type'] != 'Unknown'}),
        'details': details,
        'errors': errors,
    }
