"""
QR History Backend - API Routes Package
=========================================

Route Inventory (process server, prefix from API_PREFIX, default /api):
    - history.py: GET    /api/history          (list, newest first)
                  POST   /api/history          (create-or-touch)
                  DELETE /api/history/{id}     (delete one)
                  DELETE /api/history          (delete all)
    - health.py:  GET    /api/health           (liveness + store probe)

Routes are thin: they resolve the store dependency, call HistoryService and
set the status code. The serverless function routes the same operations in
qrhistory.dispatch.
"""
