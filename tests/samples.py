"""Sample contexts as emitted by the issue CLI."""

DOUBLE_SUBMIT_CONTEXT = """\
# FRONTEND-3K: checkout submit failure

**TypeError**: Cannot read properties of undefined (reading 'orderId')

## Stack Trace

  node_modules/react-dom/cjs/react-dom.development.js:3945 in invokeGuardedCallback
> src/checkout/CheckoutForm.tsx:88 in handleSubmit
> src/checkout/api.ts:42 in submitOrder

## Breadcrumbs

- [100] ui.click: button#place-order
- [115] ui.click: button#place-order
- [240] http: POST /api/orders [201]
- [310] http: POST /api/orders [500] duplicate key value violates unique constraint

## Tags

| Key | Value |
|-----|-------|
| environment | production |
| release | web@1.4.2 |
"""

MISSING_CONFIG_CONTEXT = """\
# BACKEND-91

KeyError: 'PAYMENTS_API_KEY'

## Traceback

> File "app/payments/client.py", line 12, in get_client
  File "/usr/lib/python3.12/os.py", line 714, in __getitem__

## Breadcrumbs

- [10] navigation: /checkout
- [20] console: config lookup for 'PAYMENTS_API_KEY' returned None (required key)
"""

DEPENDENCY_CONTEXT = """\
# FRONTEND-7A

**TypeError**: Cannot read properties of undefined (reading 'items')

## Stack Trace

> src/cart/CartView.tsx:30 in renderItems

## Breadcrumbs

- [10] navigation: /cart
- [20] http: GET /api/inventory [503] upstream unavailable
- [25] ui.click: button#refresh

## Tags

- environment: staging
"""

CRASH_CONTEXT = """\
**TypeError**: Cannot read properties of undefined (reading 'name')

## Stack Trace

> src/profile/Avatar.tsx:12 in Avatar

## Breadcrumbs

- [5] navigation: /profile
"""

DATA_INTEGRITY_CONTEXT = """\
ValueError: 'archived' is not a valid OrderStatus

## Stack Trace

> File "app/orders/models.py", line 30, in from_payload

## Breadcrumbs

- [10] http: GET /api/orders/42 [200]

## Tags

- schema.client: v2
- schema.server: v3
"""

NO_FRAMES_CONTEXT = """\
**TypeError**: Cannot read properties of undefined (reading 'id')

## Breadcrumbs

- [1] ui.click: button#save
"""
