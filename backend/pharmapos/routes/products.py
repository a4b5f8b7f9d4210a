# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/pharmapos/routes/products.py
"""
Product catalog routes.

- GET /api/products?page&limit&search (Products.show)
- GET /api/products/<id> (Products.show)
- POST /api/products (Products.create)
- PUT /api/products/<id> (Products.edit); a stock change is logged as an adjustment
- DELETE /api/products/<id> (Products.delete)
"""
from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_permission
from ..permissions import Action, Module
from ..services import products_service
from ..validation import json_object


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_permission(Module.PRODUCTS, Action.SHOW)
def list_products_route():
    result = products_service.list_products(
        page=request.args.get("page", type=int),
        limit=request.args.get("limit", type=int),
        search=request.args.get("search"),
    )
    return jsonify(result)


@products_bp.get("/<int:product_id>")
@require_auth
@require_permission(Module.PRODUCTS, Action.SHOW)
def get_product_route(product_id: int):
    return jsonify(products_service.get_product(product_id).to_dict())


@products_bp.post("")
@require_auth
@require_permission(Module.PRODUCTS, Action.CREATE)
def create_product_route():
    payload = json_object()
    patch = products_service.validate_product_payload(payload, partial=False)
    product = products_service.create_product(patch=patch)
    return jsonify(product.to_dict()), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_permission(Module.PRODUCTS, Action.EDIT)
def update_product_route(product_id: int):
    payload = json_object()
    patch = products_service.validate_product_payload(payload, partial=True)
    product = products_service.update_product(product_id=product_id, patch=patch)
    return jsonify(product.to_dict())


@products_bp.delete("/<int:product_id>")
@require_auth
@require_permission(Module.PRODUCTS, Action.DELETE)
def delete_product_route(product_id: int):
    products_service.delete_product(product_id=product_id)
    return jsonify({"message": "Product deleted"})
