"""
身份解析（apps.auth）
- 登录 / 注册 / 刷新令牌
- 按邮箱绑定的角色与当前用户身份解析
"""
