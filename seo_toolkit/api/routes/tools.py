"""
Optimization API Routes
Meta, social, image, structured data, sitemap and robots.txt tooling
"""

import json
import logging

from flask import Blueprint, current_app, jsonify

from seo_toolkit.api.schemas import (
    ImagesRequest,
    MetaRequest,
    RobotsRequest,
    SitemapRequest,
    SocialMediaRequest,
    StructuredDataRequest,
    ValidateRobotsRequest,
    ValidateStructuredDataRequest,
    parse_request,
)
from seo_toolkit.services.fetcher import normalize_url
from seo_toolkit.services.image_seo import ImageSEOOptimizer
from seo_toolkit.services.meta_optimizer import MetaOptimizer
from seo_toolkit.services.robots import (
    analyze_robots,
    check_site_robots,
    generate_media_robots,
    generate_optimization_suggestions,
    generate_robots_txt,
    validate_robots,
)
from seo_toolkit.services.sitemap import SitemapBuilder
from seo_toolkit.services.social_media import SocialMediaOptimizer
from seo_toolkit.services.structured_data import (
    StructuredDataGenerator,
    analyze_page_schemas,
    validate_structured_data,
)

# Configure logging
logger = logging.getLogger(__name__)

# Create blueprint
tools_bp = Blueprint('tools', __name__)

# Stateless helpers
meta_optimizer = MetaOptimizer()
social_optimizer = SocialMediaOptimizer()
image_optimizer = ImageSEOOptimizer()
schema_generator = StructuredDataGenerator()


@tools_bp.route('/optimize/meta', methods=['POST'])
def optimize_meta():
    payload = parse_request(MetaRequest)
    response = {
        'success': True,
        'optimization': meta_optimizer.optimize_meta(payload.title, payload.description, payload.keywords)
    }
    if payload.industry:
        response['templates'] = meta_optimizer.generate_meta_suggestions(payload.industry)
    return jsonify(response)


@tools_bp.route('/optimize/social-media', methods=['POST'])
def optimize_social_media():
    """Generate social tags from page data, analyze existing tags from HTML, or both"""
    payload = parse_request(SocialMediaRequest)
    data = payload.model_dump(exclude_none=True)
    html_content = data.pop('html', None)

    response = {'success': True}
    if payload.title:
        response['tags'] = social_optimizer.generate_optimized_tags(data)
    if html_content:
        response['analysis'] = social_optimizer.analyze_social_tags(html_content)
    return jsonify(response)


@tools_bp.route('/optimize/images', methods=['POST'])
def optimize_images():
    payload = parse_request(ImagesRequest)
    results = image_optimizer.batch_optimize_images(payload.images)
    return jsonify(dict(results, success=True, checklist=image_optimizer.seo_checklist()))


@tools_bp.route('/generate/structured-data', methods=['POST'])
def generate_structured_data():
    payload = parse_request(StructuredDataRequest)
    try:
        schema = schema_generator.generate(payload.type, payload.data)
    except (ValueError, TypeError) as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    return jsonify({
        'success': True,
        'type': payload.type,
        'schema': schema,
        'script_tag': (
            '<script type="application/ld+json">\n'
            f'{json.dumps(schema, indent=2, ensure_ascii=False)}\n'
            '</script>'
        ),
        'validation': validate_structured_data(schema)
    })


@tools_bp.route('/validate/structured-data', methods=['POST'])
def validate_structured_data_route():
    """Validate JSON-LD documents, or inventory the structured data embedded in a page"""
    payload = parse_request(ValidateStructuredDataRequest)
    response = {'success': True}

    if payload.data is not None:
        documents = payload.data if isinstance(payload.data, list) else [payload.data]
        results = [validate_structured_data(document) for document in documents]
        response['is_valid'] = all(result['is_valid'] for result in results)
        response['results'] = results

    if payload.html:
        response['page'] = analyze_page_schemas(payload.html, payload.url)
    return jsonify(response)


@tools_bp.route('/generate/sitemap', methods=['POST'])
def generate_sitemap():
    """
    Build an XML sitemap from explicit URLs, or from the site's standard
    pages when only a domain is given. Lists longer than the per-file limit
    are split into several sitemaps.
    """
    payload = parse_request(SitemapRequest)
    builder = SitemapBuilder()

    if payload.urls:
        urls = payload.model_dump(exclude_none=True)['urls']
    else:
        urls = builder.site_urls(normalize_url(payload.domain).rstrip('/'))

    response = {'success': True, 'url_count': len(urls)}
    if len(urls) > builder.max_urls:
        response['sitemaps'] = builder.split_large_sitemap(urls)
    else:
        sitemap = builder.generate_sitemap(urls, payload.include_images, payload.include_videos)
        response['sitemap'] = sitemap
        response['validation'] = builder.validate_sitemap(sitemap)

    if payload.domain:
        base = normalize_url(payload.domain).rstrip('/')
        response['robots_entry'] = builder.robots_sitemap_entry(f'{base}/sitemap.xml')
    return jsonify(response)


@tools_bp.route('/generate/robots', methods=['POST'])
def generate_robots():
    payload = parse_request(RobotsRequest)
    if payload.profile == 'media':
        content = generate_media_robots(payload.domain)
    else:
        content = generate_robots_txt(payload.domain, payload.sitemap_urls, payload.custom_rules)

    return jsonify({
        'success': True,
        'robots_txt': content,
        'validation': validate_robots(content),
        'suggestions': generate_optimization_suggestions(
            payload.domain, 'video-greeting' if payload.profile == 'media' else 'general'
        )
    })


@tools_bp.route('/validate/robots', methods=['POST'])
def validate_robots_route():
    """Validate supplied robots.txt content, or fetch and check a live site's file"""
    payload = parse_request(ValidateRobotsRequest)
    if payload.content is not None:
        return jsonify({
            'success': True,
            'validation': validate_robots(payload.content),
            'analysis': analyze_robots(payload.content)
        })

    text_fetcher = current_app.extensions['seo_toolkit']['text_fetcher']
    site = check_site_robots(normalize_url(payload.url), fetcher=text_fetcher)
    return jsonify({'success': True, 'site': site})
